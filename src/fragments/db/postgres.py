import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_FRAGMENTS_DDL = (
    "CREATE TABLE IF NOT EXISTS fragments ("
    " owner_id TEXT NOT NULL,"
    " id TEXT NOT NULL,"
    " type TEXT NOT NULL,"
    " size INTEGER NOT NULL DEFAULT 0,"
    " created TIMESTAMPTZ NOT NULL,"
    " updated TIMESTAMPTZ NOT NULL,"
    " PRIMARY KEY (owner_id, id)"
    ")"
)

_FRAGMENT_DATA_DDL = (
    "CREATE TABLE IF NOT EXISTS fragment_data ("
    " owner_id TEXT NOT NULL,"
    " id TEXT NOT NULL,"
    " data BYTEA NOT NULL,"
    " PRIMARY KEY (owner_id, id),"
    " FOREIGN KEY (owner_id, id) REFERENCES fragments (owner_id, id) ON DELETE CASCADE"
    ")"
)


class PostgresFragmentStore:
    """Fragment metadata in ``fragments``, payloads in ``fragment_data``.

    The foreign key keeps a payload from outliving its metadata row, and
    metadata writes are upserts that leave ``fragment_data`` untouched.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._ready = False

    async def ensure_ready(self) -> None:
        """Create the tables when migrations have not been run."""
        if self._ready:
            return
        async with self._engine.begin() as conn:
            await conn.execute(text(_FRAGMENTS_DDL))
            await conn.execute(text(_FRAGMENT_DATA_DDL))
        self._ready = True

    async def read_fragment_meta(self, owner_id: str, fragment_id: str) -> dict[str, Any] | None:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text(
                    "SELECT id, owner_id, type, size, created, updated FROM fragments"
                    " WHERE owner_id = :owner_id AND id = :id"
                ),
                {"owner_id": owner_id, "id": fragment_id},
            )
            row = result.mappings().fetchone()
            return dict(row) if row is not None else None

    async def write_fragment_meta(self, owner_id: str, record: dict[str, Any]) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text(
                    """
                    INSERT INTO fragments (owner_id, id, type, size, created, updated)
                    VALUES (:owner_id, :id, :type, :size, :created, :updated)
                    ON CONFLICT (owner_id, id) DO UPDATE
                    SET type = EXCLUDED.type, size = EXCLUDED.size, updated = EXCLUDED.updated
                    """
                ),
                {
                    "owner_id": owner_id,
                    "id": record["id"],
                    "type": record["type"],
                    "size": record["size"],
                    "created": record["created"],
                    "updated": record["updated"],
                },
            )

    async def read_fragment_data(self, owner_id: str, fragment_id: str) -> bytes | None:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text("SELECT data FROM fragment_data WHERE owner_id = :owner_id AND id = :id"),
                {"owner_id": owner_id, "id": fragment_id},
            )
            value = result.scalar_one_or_none()
            return bytes(value) if value is not None else None

    async def write_fragment_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text(
                    """
                    INSERT INTO fragment_data (owner_id, id, data)
                    VALUES (:owner_id, :id, :data)
                    ON CONFLICT (owner_id, id) DO UPDATE SET data = EXCLUDED.data
                    """
                ),
                {"owner_id": owner_id, "id": fragment_id, "data": data},
            )

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text("DELETE FROM fragments WHERE owner_id = :owner_id AND id = :id"),
                {"owner_id": owner_id, "id": fragment_id},
            )

    async def list_fragment_ids(self, owner_id: str) -> list[str]:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text("SELECT id FROM fragments WHERE owner_id = :owner_id ORDER BY created, id"),
                {"owner_id": owner_id},
            )
            return [str(row[0]) for row in result.fetchall()]

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
