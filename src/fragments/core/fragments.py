import asyncio
import logging

from fragments.core.errors import NotFoundError, TypeMismatchError, UnsupportedTypeError, ValidationError
from fragments.core.ports.storage import FragmentStore
from fragments.models import Fragment, base_mime_type, is_supported_type

logger = logging.getLogger(__name__)


def _as_bytes(data: object) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise ValidationError("Fragment data must be bytes")


async def create_fragment(
    store: FragmentStore,
    owner_id: str,
    content_type: str,
    data: bytes | None = None,
) -> Fragment:
    """Create and persist a new fragment, writing ``data`` as its payload when given."""
    if not content_type or not is_supported_type(content_type):
        raise UnsupportedTypeError(content_type)
    payload = _as_bytes(data) if data is not None else None

    fragment = Fragment(owner_id=owner_id, type=content_type, size=len(payload) if payload is not None else 0)
    await save_fragment(store, fragment)
    if payload is not None:
        # size and updated were persisted by save_fragment
        await store.write_fragment_data(fragment.owner_id, fragment.id, payload)

    logger.info("Created fragment %s for owner %s", fragment.id, owner_id)
    return fragment


async def save_fragment(store: FragmentStore, fragment: Fragment) -> None:
    """Persist metadata, keeping any payload already stored for the fragment."""
    fragment.touch()
    existing = await store.read_fragment_data(fragment.owner_id, fragment.id)
    await store.write_fragment_meta(fragment.owner_id, fragment.to_record())
    if existing is not None:
        await store.write_fragment_data(fragment.owner_id, fragment.id, existing)


async def set_fragment_data(store: FragmentStore, fragment: Fragment, data: bytes) -> None:
    """Write the payload and refresh size/updated. Metadata is not persisted here."""
    payload = _as_bytes(data)
    fragment.size = len(payload)
    fragment.touch()
    await store.write_fragment_data(fragment.owner_id, fragment.id, payload)


async def get_fragment_data(store: FragmentStore, fragment: Fragment) -> bytes | None:
    return await store.read_fragment_data(fragment.owner_id, fragment.id)


async def fragment_by_id(store: FragmentStore, owner_id: str, fragment_id: str) -> Fragment | None:
    record = await store.read_fragment_meta(owner_id, fragment_id)
    if record is None:
        return None
    return Fragment.from_record(record)


async def fragments_by_user(
    store: FragmentStore, owner_id: str, expand: bool = False
) -> list[str] | list[Fragment]:
    """List an owner's fragment ids, or their full metadata when ``expand`` is set."""
    ids = await store.list_fragment_ids(owner_id)
    if not expand:
        return ids
    found = await asyncio.gather(*(fragment_by_id(store, owner_id, fid) for fid in ids))
    return [f for f in found if f is not None]


async def read_fragment(store: FragmentStore, owner_id: str, fragment_id: str) -> Fragment:
    fragment = await fragment_by_id(store, owner_id, fragment_id)
    if fragment is None:
        raise NotFoundError(owner_id, fragment_id)
    return fragment


async def read_fragment_data(store: FragmentStore, owner_id: str, fragment_id: str) -> bytes:
    if await store.read_fragment_meta(owner_id, fragment_id) is None:
        raise NotFoundError(owner_id, fragment_id)
    data = await store.read_fragment_data(owner_id, fragment_id)
    if data is None:
        raise NotFoundError(owner_id, fragment_id)
    return data


async def update_fragment_data(
    store: FragmentStore,
    owner_id: str,
    fragment_id: str,
    content_type: str,
    data: bytes,
) -> Fragment:
    """Replace a fragment's payload. The declared type must match the stored mime type."""
    fragment = await read_fragment(store, owner_id, fragment_id)
    if base_mime_type(content_type or "") != fragment.mime_type:
        raise TypeMismatchError(fragment.mime_type, content_type)
    payload = _as_bytes(data)

    await set_fragment_data(store, fragment, payload)
    await save_fragment(store, fragment)
    logger.info("Updated fragment %s for owner %s (%d bytes)", fragment_id, owner_id, fragment.size)
    return fragment


async def delete_fragment(store: FragmentStore, owner_id: str, fragment_id: str) -> None:
    await store.delete_fragment(owner_id, fragment_id)
    logger.info("Deleted fragment %s for owner %s", fragment_id, owner_id)
