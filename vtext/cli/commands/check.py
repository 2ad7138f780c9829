from __future__ import annotations

from pathlib import Path

import typer

from vtext.cli.commands._helpers import exit_with_error
from vtext.cli.context import build_context
from vtext.core.errors import ErrorCode
from vtext.core.result import Err
from vtext.output.console import Style
from vtext.version.document import format_date, read_document
from vtext.version.pattern import VersionPattern


def check(
    basedir: Path | None = typer.Option(None, "--basedir", help="Project root (default: cwd)."),
    config_file: Path | None = typer.Option(
        None, "--config", help="TOML config (default: <basedir>/pyproject.toml)."
    ),
    input_file: str | None = typer.Option(None, "--input", help="VERSION.txt to check."),
) -> None:
    """Parse VERSION.txt and report its releases."""
    ctx = build_context(basedir=basedir, config_file=config_file)
    path = ctx.basedir / (input_file or ctx.config.input)

    pattern = VersionPattern.from_key(ctx.config.text_key)
    if isinstance(pattern, Err):
        exit_with_error(pattern.error, ctx)

    loaded = read_document(path, pattern.value)
    if isinstance(loaded, Err):
        exit_with_error(loaded.error, ctx)
    document = loaded.value

    ctx.console.header(f"{path.name} ({len(document)} releases)")
    invalid: list[str] = []
    for release in document:
        if not pattern.value.is_match(release.version):
            invalid.append(release.version)
            ctx.console.print(f"{release.version}: not a valid version identifier", Style.ERROR)
            continue
        date = format_date(release.released_on) if release.released_on else "unreleased"
        ctx.console.print(f"{release.version}: {date}, {len(release.issues)} issue(s)", Style.DIM)

    if invalid:
        ctx.console.error(f"{len(invalid)} version id(s) do not conform to [{pattern.value.key}]")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx.console.success(f"{path.name} is valid")
