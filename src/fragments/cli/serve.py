from typing import Annotated

import typer
from rich.console import Console

from fragments.config import configure_logging, get_settings

console = Console()


def serve(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on.")] = 8080,
    log_level: Annotated[str | None, typer.Option(help="Override LOG_LEVEL.")] = None,
) -> None:
    """Start the fragments REST API server."""
    import uvicorn

    from fragments.api.app import create_app

    settings = get_settings()
    configure_logging(log_level or settings.log_level)
    app = create_app(settings)
    console.print(f"[green]Starting API server on {host}:{port}[/green] (storage: {settings.storage})")
    uvicorn.run(app, host=host, port=port, log_config=None)
