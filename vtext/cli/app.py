from __future__ import annotations

import typer

from vtext import __version__
from vtext.cli.commands.check import check
from vtext.cli.commands.update import update

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(update)
app.command()(check)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Keep VERSION.txt in sync with git tags and commits."""


def main() -> None:
    app()
