import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from fragments.config import get_settings
from fragments.core.convert import FragmentConverter
from fragments.core.errors import FragmentError
from fragments.core.fragments import fragments_by_user, read_fragment, read_fragment_data
from fragments.core.ports.storage import FragmentStore
from fragments.models import Fragment

fragment_app = typer.Typer(help="Inspect stored fragments.")
console = Console()


def _get_store() -> "FragmentStore":
    from fragments.db.engine import get_engine
    from fragments.db.postgres import PostgresFragmentStore

    settings = get_settings()
    if settings.storage != "postgres":
        console.print(
            f"[red]FRAGMENTS_STORAGE={settings.storage} is not inspectable from the CLI; "
            "set FRAGMENTS_STORAGE=postgres.[/red]"
        )
        raise typer.Exit(1)
    return PostgresFragmentStore(get_engine(settings.database_url))


def _render_fragments(fragments: list[Fragment]) -> None:
    table = Table(show_lines=False)
    for h in ("id", "type", "size", "created", "updated"):
        table.add_column(h)
    for f in fragments:
        table.add_row(f.id, f.type, str(f.size), f.created.isoformat(), f.updated.isoformat() if f.updated else "")
    console.print(table)
    console.print(f"({len(fragments)} fragments)")


@fragment_app.command("list")
def list_fragments(
    owner_id: Annotated[str, typer.Argument(help="Owner id (hashed email).")],
    expand: Annotated[bool, typer.Option(help="Show full metadata instead of ids.")] = False,
) -> None:
    """List an owner's fragments."""
    store = _get_store()

    async def _run() -> None:
        try:
            await store.ensure_ready()
            found = await fragments_by_user(store, owner_id, expand=expand)
            if expand:
                _render_fragments([f for f in found if isinstance(f, Fragment)])
            else:
                for fid in found:
                    console.print(str(fid))
        finally:
            await store.dispose()

    asyncio.run(_run())


@fragment_app.command("info")
def info(
    owner_id: Annotated[str, typer.Argument(help="Owner id (hashed email).")],
    fragment_id: Annotated[str, typer.Argument(help="Fragment id.")],
) -> None:
    """Show one fragment's metadata and the formats it can be served as."""
    store = _get_store()

    async def _run() -> None:
        try:
            await store.ensure_ready()
            fragment = await read_fragment(store, owner_id, fragment_id)
        except FragmentError as exc:
            console.print(f"[red]{exc.message}[/red]")
            raise typer.Exit(1) from exc
        finally:
            await store.dispose()
        _render_fragments([fragment])
        console.print(f"formats: {', '.join(fragment.formats)}")

    asyncio.run(_run())


@fragment_app.command("convert")
def convert(
    owner_id: Annotated[str, typer.Argument(help="Owner id (hashed email).")],
    fragment_id: Annotated[str, typer.Argument(help="Fragment id.")],
    extension: Annotated[str, typer.Argument(help="Target extension, e.g. html, txt, png.")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout.")] = None,
) -> None:
    """Convert a fragment's data and print or save the result."""
    store = _get_store()
    converter = FragmentConverter()

    async def _run() -> None:
        try:
            await store.ensure_ready()
            fragment = await read_fragment(store, owner_id, fragment_id)
            data = await read_fragment_data(store, owner_id, fragment_id)
            result = await converter.convert(fragment, data, extension)
        except FragmentError as exc:
            console.print(f"[red]{exc.message}[/red]")
            raise typer.Exit(1) from exc
        finally:
            await store.dispose()

        if output is not None:
            output.write_bytes(result.data)
            console.print(f"[green]Wrote[/green] {len(result.data)} bytes ({result.content_type}) to {output}")
        elif result.content_type.startswith("image/"):
            console.print("[yellow]Binary output; use --output to save it.[/yellow]")
        else:
            typer.echo(result.data.decode("utf-8", errors="replace"))

    asyncio.run(_run())
