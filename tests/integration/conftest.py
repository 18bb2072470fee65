"""Session-scoped fixtures for integration tests."""

import warnings
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from alembic import command
from alembic.config import Config
from fragments.db import PostgresFragmentStore

_REPO_ROOT = Path(__file__).parent.parent.parent


def _alembic_config(url: str) -> Config:
    cfg = Config(str(_REPO_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_REPO_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


@pytest.fixture(scope="session")
def postgres_container() -> Generator[DockerContainer, None, None]:
    container = (
        DockerContainer("postgres:16-alpine").with_exposed_ports(5432).with_env("POSTGRES_PASSWORD", "postgres")
    )
    container.start()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        # the init server only listens on a unix socket
        wait_for_logs(container, "PostgreSQL init process complete", timeout=60)
        wait_for_logs(container, "listening on IPv4", timeout=60)
    yield container
    container.stop()


@pytest.fixture(scope="session")
def test_db_url(postgres_container: DockerContainer) -> str:
    """Async connection URL for the test database."""
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://postgres:postgres@{host}:{port}/postgres"


@pytest.fixture(scope="session")
def _run_migrations(test_db_url: str) -> Generator[None, None, None]:
    """Run migrations once per session, downgrade on teardown."""
    cfg = _alembic_config(test_db_url)
    command.upgrade(cfg, "head")
    yield
    command.downgrade(cfg, "base")


@pytest_asyncio.fixture
async def store(_run_migrations: None, test_db_url: str) -> AsyncGenerator[PostgresFragmentStore, None]:
    """Per-test store with its own engine so each event loop gets its own pool."""
    instance = PostgresFragmentStore(create_async_engine(test_db_url, future=True))
    await instance.ensure_ready()
    yield instance
    await instance.dispose()
