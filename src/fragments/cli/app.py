import typer

from fragments.cli.db import db_app
from fragments.cli.fragment import fragment_app
from fragments.cli.serve import serve

app = typer.Typer(
    name="fragments",
    help="Fragments CLI — run the API and inspect stored fragments.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(db_app, name="db")
app.add_typer(fragment_app, name="fragment")
app.command("serve")(serve)


def main() -> None:
    app()
