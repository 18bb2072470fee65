from typing import Any


class InMemoryFragmentStore:
    """Dict-backed store. Metadata and payloads are kept apart, like the SQL tables."""

    def __init__(self) -> None:
        self.metadata: dict[tuple[str, str], dict[str, Any]] = {}
        self.data: dict[tuple[str, str], bytes] = {}

    async def read_fragment_meta(self, owner_id: str, fragment_id: str) -> dict[str, Any] | None:
        record = self.metadata.get((owner_id, fragment_id))
        return dict(record) if record is not None else None

    async def write_fragment_meta(self, owner_id: str, record: dict[str, Any]) -> None:
        self.metadata[(owner_id, record["id"])] = dict(record)

    async def read_fragment_data(self, owner_id: str, fragment_id: str) -> bytes | None:
        return self.data.get((owner_id, fragment_id))

    async def write_fragment_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        if (owner_id, fragment_id) not in self.metadata:
            raise KeyError(f"no metadata for fragment {fragment_id} of owner {owner_id}")
        self.data[(owner_id, fragment_id)] = bytes(data)

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        self.metadata.pop((owner_id, fragment_id), None)
        self.data.pop((owner_id, fragment_id), None)

    async def list_fragment_ids(self, owner_id: str) -> list[str]:
        return [fid for (owner, fid) in self.metadata if owner == owner_id]

    async def ensure_ready(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass
