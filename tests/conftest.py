"""Shared fixtures and helpers for tests."""

import io
from pathlib import Path

import pytest
from PIL import Image

from fragments.db import InMemoryFragmentStore

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def in_memory_store() -> InMemoryFragmentStore:
    return InMemoryFragmentStore()


@pytest.fixture
def png_bytes() -> bytes:
    """A small semi-transparent PNG."""
    out = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 0, 0, 128)).save(out, format="PNG")
    return out.getvalue()
