import asyncio

import pytest

from fragments.db import InMemoryFragmentStore


def _record(fragment_id: str) -> dict[str, object]:
    return {"id": fragment_id, "owner_id": "owner", "type": "text/plain", "size": 0, "created": None, "updated": None}


def test_metadata_write_leaves_payload_untouched(in_memory_store: InMemoryFragmentStore) -> None:
    asyncio.run(in_memory_store.write_fragment_meta("owner", _record("a")))
    asyncio.run(in_memory_store.write_fragment_data("owner", "a", b"payload"))

    asyncio.run(in_memory_store.write_fragment_meta("owner", _record("a")))

    assert asyncio.run(in_memory_store.read_fragment_data("owner", "a")) == b"payload"


def test_payload_requires_metadata(in_memory_store: InMemoryFragmentStore) -> None:
    with pytest.raises(KeyError):
        asyncio.run(in_memory_store.write_fragment_data("owner", "orphan", b"x"))


def test_read_returns_copies(in_memory_store: InMemoryFragmentStore) -> None:
    asyncio.run(in_memory_store.write_fragment_meta("owner", _record("a")))
    record = asyncio.run(in_memory_store.read_fragment_meta("owner", "a"))
    assert record is not None
    record["type"] = "image/png"
    again = asyncio.run(in_memory_store.read_fragment_meta("owner", "a"))
    assert again is not None
    assert again["type"] == "text/plain"


def test_list_ids_per_owner_in_insertion_order(in_memory_store: InMemoryFragmentStore) -> None:
    for fid in ("c", "a", "b"):
        asyncio.run(in_memory_store.write_fragment_meta("owner", _record(fid)))
    asyncio.run(in_memory_store.write_fragment_meta("other", _record("z")))

    assert asyncio.run(in_memory_store.list_fragment_ids("owner")) == ["c", "a", "b"]
    assert asyncio.run(in_memory_store.list_fragment_ids("other")) == ["z"]


def test_delete_removes_both_records(in_memory_store: InMemoryFragmentStore) -> None:
    asyncio.run(in_memory_store.write_fragment_meta("owner", _record("a")))
    asyncio.run(in_memory_store.write_fragment_data("owner", "a", b"x"))

    asyncio.run(in_memory_store.delete_fragment("owner", "a"))

    assert asyncio.run(in_memory_store.read_fragment_meta("owner", "a")) is None
    assert asyncio.run(in_memory_store.read_fragment_data("owner", "a")) is None
    assert asyncio.run(in_memory_store.ping()) is True
