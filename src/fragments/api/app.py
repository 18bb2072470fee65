from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fragments.api.errors import register_error_handlers
from fragments.api.lifespan import lifespan
from fragments.api.middleware import RequestLoggingMiddleware
from fragments.api.routes.fragments import router as fragments_router
from fragments.api.routes.health import router as health_router
from fragments.api.routes.root import router as root_router
from fragments.api.version import __version__
from fragments.config import Settings, get_settings


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Fragments API",
        description="Store, update, and convert small typed data fragments.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Location"],
    )
    register_error_handlers(app)

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(fragments_router)

    return app
