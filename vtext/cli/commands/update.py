from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer

from vtext.cli.commands._helpers import exit_with_error
from vtext.cli.context import CLIContext, build_context
from vtext.core.config import VersionTextConfig
from vtext.core.result import Err
from vtext.git.repository import Repository
from vtext.output.console import Style
from vtext.update.options import UpdateOptions
from vtext.update.service import update_version_text
from vtext.version.errors import VersionTextError
from vtext.version.pattern import VersionPattern


def update(
    version: str | None = typer.Option(
        None,
        "--version",
        "--section",
        help="Project version to update (default: [project].version, then latest tag).",
    ),
    basedir: Path | None = typer.Option(None, "--basedir", help="Project root (default: cwd)."),
    config_file: Path | None = typer.Option(
        None, "--config", help="TOML config (default: <basedir>/pyproject.toml)."
    ),
    input_file: str | None = typer.Option(None, "--input", help="VERSION.txt to read."),
    output_file: str | None = typer.Option(None, "--output", help="Generated VERSION.txt."),
    text_key: str | None = typer.Option(None, "--text-key", help="Version key used in the file."),
    tag_key: str | None = typer.Option(None, "--tag-key", help="Version key used for git tags."),
    sort_existing: bool | None = typer.Option(
        None, "--sort-existing/--no-sort-existing", help="Sort issues of existing releases."
    ),
    refresh_tags: bool | None = typer.Option(
        None, "--refresh-tags/--no-refresh-tags", help="Run 'git fetch --tags' first."
    ),
    update_date: bool | None = typer.Option(
        None, "--update-date/--no-update-date", help="Stamp the release date if missing."
    ),
    copy_generated: bool | None = typer.Option(
        None, "--copy-generated/--no-copy-generated", help="Copy the output over the input."
    ),
    attach: bool | None = typer.Option(
        None, "--attach/--no-attach", help="Attach the output to the artifacts directory."
    ),
    skip: bool = typer.Option(False, "--skip", help="Do nothing (generation disabled)."),
    verbose: bool = typer.Option(False, "--verbose", help="Show commit ids and paths."),
) -> None:
    """Update the current version entry in VERSION.txt from git history."""
    ctx = build_context(basedir=basedir, config_file=config_file, verbose=verbose)

    overrides: dict[str, object] = {
        "input": input_file,
        "output": output_file,
        "text_key": text_key,
        "tag_key": tag_key,
        "sort_existing": sort_existing,
        "refresh_tags": refresh_tags,
        "update_date": update_date,
        "copy_generated": copy_generated,
        "attach": attach,
        "skip": skip or None,
    }
    config = replace(ctx.config, **{k: v for k, v in overrides.items() if v is not None})

    repo = Repository(ctx.basedir)
    resolved = _resolve_version(ctx, config=config, explicit=version, repo=repo)
    options = UpdateOptions.from_config(config, basedir=ctx.basedir, version=resolved)

    result = update_version_text(options, git=repo, console=ctx.console)
    if isinstance(result, Err):
        exit_with_error(result.error, ctx)

    outcome = result.value
    if outcome.status == "bootstrapped":
        ctx.console.success(f"wrote {outcome.output_path}")
        if outcome.commit_command:
            ctx.console.print(outcome.commit_command, Style.DIM)


def _resolve_version(
    ctx: CLIContext,
    *,
    config: VersionTextConfig,
    explicit: str | None,
    repo: Repository,
) -> str:
    if explicit and explicit.strip():
        return explicit.strip()
    if config.project_version:
        return config.project_version

    # Nothing to resolve when the run is a no-op.
    if config.skip or not (ctx.basedir / config.input).is_file():
        return ""

    tag_pattern = VersionPattern.from_key(config.tag_key)
    if isinstance(tag_pattern, Err):
        exit_with_error(tag_pattern.error, ctx)

    last = tag_pattern.value.get_last_version(repo)
    raw = tag_pattern.value.raw_version(last) if last is not None else None
    if raw is None:
        exit_with_error(
            VersionTextError(
                kind="invalid_input",
                message="no project version available",
                hint="pass --version or set [project].version in pyproject.toml",
            ),
            ctx,
        )

    ctx.console.info(f"Using version {raw} from tag {last}")
    return raw
