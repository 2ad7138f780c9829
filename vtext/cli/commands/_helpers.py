"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from vtext.core.errors import ErrorCode
from vtext.output.console import Style
from vtext.version.errors import VersionTextError, VersionTextErrorKind

if TYPE_CHECKING:
    from vtext.cli.context import CLIContext


def error_exit_code(kind: VersionTextErrorKind) -> ErrorCode:
    if kind == "git_failed":
        return ErrorCode.ENV_ERROR
    if kind == "unable_to_fetch_tags":
        return ErrorCode.NETWORK_ERROR
    if kind == "io_failed":
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_with_error(error: VersionTextError, ctx: CLIContext) -> NoReturn:
    """Print error (and hint) then exit with the code mapped from its kind."""
    ctx.console.error(error.message)
    if error.hint:
        ctx.console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(error_exit_code(error.kind)))
