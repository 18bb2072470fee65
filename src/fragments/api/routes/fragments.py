from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from fragments.api.dependencies import get_converter, get_owner_id, get_store
from fragments.api.schemas import FragmentListResponse, FragmentSchema
from fragments.config import Settings, get_settings
from fragments.core.convert import FragmentConverter
from fragments.core.fragments import (
    create_fragment,
    delete_fragment,
    fragments_by_user,
    read_fragment,
    read_fragment_data,
    update_fragment_data,
)
from fragments.core.ports.storage import FragmentStore
from fragments.models import Fragment

router = APIRouter(prefix="/v1/fragments", tags=["fragments"])

Store = Annotated[FragmentStore, Depends(get_store)]
OwnerId = Annotated[str, Depends(get_owner_id)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def _read_body(request: Request, settings: Settings) -> tuple[str, bytes]:
    """Return the declared content type and raw body, enforcing the size limit."""
    content_type = request.headers.get("content-type")
    if not content_type:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail="Content-Type header required")

    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > settings.max_body_size:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Payload too large")
    body = await request.body()
    if len(body) > settings.max_body_size:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Payload too large")
    return content_type, body


def _to_schema(fragment: Fragment) -> FragmentSchema:
    return FragmentSchema.model_validate(fragment)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=FragmentSchema)
async def create(
    request: Request, response: Response, store: Store, owner_id: OwnerId, settings: AppSettings
) -> FragmentSchema:
    content_type, body = await _read_body(request, settings)
    fragment = await create_fragment(store, owner_id, content_type, body)

    base = settings.api_url or str(request.base_url).rstrip("/")
    response.headers["Location"] = f"{base.rstrip('/')}/v1/fragments/{fragment.id}"
    return _to_schema(fragment)


@router.get("", response_model=FragmentListResponse)
async def list_fragments(
    store: Store,
    owner_id: OwnerId,
    expand: Annotated[str | None, Query()] = None,
) -> FragmentListResponse:
    """List the caller's fragment ids, or full metadata with ``?expand=1``."""
    found = await fragments_by_user(store, owner_id, expand=expand == "1")
    if expand == "1":
        return FragmentListResponse(fragments=[_to_schema(f) for f in found if isinstance(f, Fragment)])
    return FragmentListResponse(fragments=[str(f) for f in found])


@router.get("/{fragment_id}/info", response_model=FragmentSchema)
async def info(fragment_id: str, store: Store, owner_id: OwnerId) -> FragmentSchema:
    fragment = await read_fragment(store, owner_id, fragment_id)
    return _to_schema(fragment)


@router.get("/{fragment_id}/data")
async def raw_data(fragment_id: str, store: Store, owner_id: OwnerId) -> Response:
    fragment = await read_fragment(store, owner_id, fragment_id)
    payload = await read_fragment_data(store, owner_id, fragment_id)
    return Response(content=payload, media_type=fragment.mime_type)


@router.get("/{fragment_ref}")
async def fetch(
    fragment_ref: str,
    store: Store,
    owner_id: OwnerId,
    converter: Annotated[FragmentConverter, Depends(get_converter)],
) -> Response:
    """Return raw data for ``{id}`` or converted data for ``{id}.{ext}``."""
    fragment_id, _, extension = fragment_ref.partition(".")
    fragment = await read_fragment(store, owner_id, fragment_id)
    payload = await read_fragment_data(store, owner_id, fragment_id)
    converted = await converter.convert(fragment, payload, extension or None)
    return Response(content=converted.data, media_type=converted.content_type)


@router.put("/{fragment_id}", response_model=FragmentSchema)
async def update(
    fragment_id: str, request: Request, store: Store, owner_id: OwnerId, settings: AppSettings
) -> FragmentSchema:
    await read_fragment(store, owner_id, fragment_id)
    content_type, body = await _read_body(request, settings)
    fragment = await update_fragment_data(store, owner_id, fragment_id, content_type, body)
    return _to_schema(fragment)


@router.delete("/{fragment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(fragment_id: str, store: Store, owner_id: OwnerId) -> Response:
    await read_fragment(store, owner_id, fragment_id)
    await delete_fragment(store, owner_id, fragment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
