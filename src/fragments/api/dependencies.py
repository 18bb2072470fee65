from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from fragments.api.auth import Authenticator, BasicAuthenticator
from fragments.config import get_settings
from fragments.core.convert import FragmentConverter
from fragments.core.ports.storage import FragmentStore
from fragments.db.engine import get_engine
from fragments.db.memory import InMemoryFragmentStore
from fragments.db.postgres import PostgresFragmentStore

logger = logging.getLogger(__name__)

_store: FragmentStore | None = None
_authenticator: Authenticator | None = None
_converter = FragmentConverter()

_basic = HTTPBasic(auto_error=False)


def _build_store() -> FragmentStore:
    settings = get_settings()
    if settings.storage == "postgres":
        return PostgresFragmentStore(get_engine(settings.database_url))
    if settings.storage != "memory":
        raise RuntimeError(f"Unknown FRAGMENTS_STORAGE: {settings.storage}")
    logger.warning("Using in-memory fragment storage; data is lost on restart")
    return InMemoryFragmentStore()


async def get_store() -> AsyncIterator[FragmentStore]:
    """Yield the configured ``FragmentStore``, creating it lazily on first call."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = _build_store()
        await _store.ensure_ready()
    yield _store


async def shutdown_store() -> None:
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.dispose()
        _store = None


def get_converter() -> FragmentConverter:
    return _converter


def get_authenticator() -> Authenticator:
    global _authenticator  # noqa: PLW0603
    if _authenticator is None:
        settings = get_settings()
        if settings.auth_strategy != "basic":
            raise RuntimeError(f"Unsupported AUTH_STRATEGY: {settings.auth_strategy}")
        _authenticator = BasicAuthenticator.from_file(settings.basic_auth_file)
    return _authenticator


def get_owner_id(
    credentials: Annotated[HTTPBasicCredentials | None, Depends(_basic)],
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> str:
    """Resolve the request's owner id, answering 401 for missing or bad credentials."""
    owner_id = None
    if credentials is not None:
        owner_id = authenticator.authenticate(credentials.username, credentials.password)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )
    return owner_id
