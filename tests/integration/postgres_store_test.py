"""Integration tests for the fragment lifecycle against PostgreSQL."""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from fragments.core.convert import FragmentConverter
from fragments.core.errors import NotFoundError, TypeMismatchError
from fragments.core.fragments import (
    create_fragment,
    delete_fragment,
    fragment_by_id,
    fragments_by_user,
    read_fragment,
    read_fragment_data,
    save_fragment,
    update_fragment_data,
)
from fragments.db import PostgresFragmentStore
from fragments.models import Fragment


def _owner() -> str:
    return f"owner-{uuid.uuid4().hex}"


@pytest.mark.asyncio
async def test_create_and_read_round_trip(store: PostgresFragmentStore) -> None:
    owner = _owner()
    payload = bytes(range(256))

    fragment = await create_fragment(store, owner, "image/png", payload)

    assert await read_fragment_data(store, owner, fragment.id) == payload
    stored = await read_fragment(store, owner, fragment.id)
    assert stored.size == len(payload)
    assert stored.type == "image/png"
    assert stored.created == fragment.created


@pytest.mark.asyncio
async def test_save_keeps_payload(store: PostgresFragmentStore) -> None:
    owner = _owner()
    fragment = await create_fragment(store, owner, "text/plain", b"keep me")

    await save_fragment(store, fragment)
    await save_fragment(store, fragment)

    assert await read_fragment_data(store, owner, fragment.id) == b"keep me"


@pytest.mark.asyncio
async def test_list_ids_in_creation_order(store: PostgresFragmentStore) -> None:
    owner = _owner()
    ids = [(await create_fragment(store, owner, "text/plain", b"x")).id for _ in range(3)]

    assert await fragments_by_user(store, owner) == ids
    expanded = await fragments_by_user(store, owner, expand=True)
    assert sorted(f.id for f in expanded if isinstance(f, Fragment)) == sorted(ids)


@pytest.mark.asyncio
async def test_update_and_type_mismatch(store: PostgresFragmentStore) -> None:
    owner = _owner()
    fragment = await create_fragment(store, owner, "application/json", b"{}")

    await update_fragment_data(store, owner, fragment.id, "application/json", b'{"b": 2}')
    with pytest.raises(TypeMismatchError):
        await update_fragment_data(store, owner, fragment.id, "text/plain", b"nope")

    assert await read_fragment_data(store, owner, fragment.id) == b'{"b": 2}'
    assert (await read_fragment(store, owner, fragment.id)).size == 8


@pytest.mark.asyncio
async def test_delete_cascades_to_payload(store: PostgresFragmentStore) -> None:
    owner = _owner()
    fragment = await create_fragment(store, owner, "text/markdown", b"# gone")

    await delete_fragment(store, owner, fragment.id)

    assert await fragment_by_id(store, owner, fragment.id) is None
    assert await store.read_fragment_data(owner, fragment.id) is None
    with pytest.raises(NotFoundError):
        await read_fragment_data(store, owner, fragment.id)


@pytest.mark.asyncio
async def test_payload_without_metadata_is_rejected(store: PostgresFragmentStore) -> None:
    with pytest.raises(IntegrityError):
        await store.write_fragment_data(_owner(), "orphan", b"x")


@pytest.mark.asyncio
async def test_convert_stored_markdown(store: PostgresFragmentStore) -> None:
    owner = _owner()
    fragment = await create_fragment(store, owner, "text/markdown", b"# Hello\n\n**x**")

    data = await read_fragment_data(store, owner, fragment.id)
    result = await FragmentConverter().convert(fragment, data, "html")

    assert b"<h1>Hello</h1>" in result.data
    assert result.content_type == "text/html"


@pytest.mark.asyncio
async def test_ping(store: PostgresFragmentStore) -> None:
    assert await store.ping() is True
