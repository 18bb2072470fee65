from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from fragments.config import get_settings


def get_engine(url: str | None = None) -> AsyncEngine:
    return create_async_engine(url or get_settings().database_url, future=True, pool_pre_ping=True)
