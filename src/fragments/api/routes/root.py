from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Response

from fragments.api.version import __version__

router = APIRouter()

_STARTED = time.monotonic()


@router.get("/")
async def root(response: Response) -> dict[str, Any]:
    """Health check and discovery endpoint. Never cached."""
    response.headers["Cache-Control"] = "no-store"
    return {
        "status": "ok",
        "version": __version__,
        "uptime": round(time.monotonic() - _STARTED, 3),
        "links": {
            "fragments": "/v1/fragments",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
