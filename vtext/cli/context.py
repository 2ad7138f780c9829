from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from vtext.core.config import VersionTextConfig, load_config_or_default
from vtext.core.errors import ErrorCode
from vtext.core.result import Err
from vtext.output.console import ConsoleProtocol, RichConsole

DEFAULT_CONFIG_FILE = "pyproject.toml"


@dataclass(frozen=True, slots=True)
class CLIContext:
    basedir: Path
    config: VersionTextConfig
    console: ConsoleProtocol


def build_context(
    *,
    basedir: Path | None = None,
    config_file: Path | None = None,
    verbose: bool = False,
) -> CLIContext:
    try:
        root = (basedir or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --basedir: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        typer.echo(f"error: --basedir '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    path = config_file if config_file is not None else root / DEFAULT_CONFIG_FILE
    if config_file is not None and not path.is_file():
        typer.echo(f"error: config file not found: {path}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        basedir=root,
        config=config_result.value,
        console=RichConsole(verbose=verbose),
    )
