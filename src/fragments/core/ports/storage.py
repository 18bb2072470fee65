from typing import Any, Protocol


class FragmentStore(Protocol):
    """Key/blob store holding fragment metadata and payloads under (owner_id, fragment_id)."""

    async def read_fragment_meta(self, owner_id: str, fragment_id: str) -> dict[str, Any] | None: ...

    async def write_fragment_meta(self, owner_id: str, record: dict[str, Any]) -> None: ...

    async def read_fragment_data(self, owner_id: str, fragment_id: str) -> bytes | None: ...

    async def write_fragment_data(self, owner_id: str, fragment_id: str, data: bytes) -> None: ...

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> None: ...

    async def list_fragment_ids(self, owner_id: str) -> list[str]: ...

    async def ensure_ready(self) -> None: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...
