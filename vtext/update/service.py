"""Update the active version entry in VERSION.txt from git history.

One linear run: load the document, work out the current and prior version
ids, find the commits between the prior tag and the current commit, merge
the issues they reference into the current release, write the result.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Literal

from vtext.core.result import Err, Ok, Result
from vtext.git.issues import IssueMatcher, populate_issues_for_range
from vtext.git.repository import GitError, GitGateway
from vtext.output.console import ConsoleProtocol
from vtext.platform.files import copy_file
from vtext.update.artifacts import ArtifactSink, DirectoryArtifactSink
from vtext.update.options import UpdateOptions
from vtext.version.document import VersionDocument, read_document, write_document
from vtext.version.errors import VersionTextError
from vtext.version.model import Release
from vtext.version.pattern import VersionPattern

UpdateStatus = Literal["skipped", "bootstrapped", "created", "updated"]


@dataclass(frozen=True, slots=True)
class UpdateOutcome:
    status: UpdateStatus
    version_id: str | None = None
    output_path: Path | None = None
    issues_added: int = 0
    commit_command: str | None = None
    attached_path: Path | None = None


def _git_failed(error: GitError) -> VersionTextError:
    return VersionTextError(
        kind="git_failed",
        message=f"git {error.command} failed: {error.message}",
        hint="run inside a git checkout with git on PATH",
    )


def _commit_command(message: str, input_file: Path) -> str:
    return f'git commit -m "{message}" {input_file.name}'


def _generate(
    document: VersionDocument,
    *,
    options: UpdateOptions,
    console: ConsoleProtocol,
    version_id: str,
    artifacts: ArtifactSink | None,
) -> Result[Path | None, VersionTextError]:
    """Write the output file, then attach and/or copy it back over the input."""
    written = write_document(document, options.output_file)
    if isinstance(written, Err):
        return written
    console.debug(f"New {options.input_file.name} written at {options.output_file}")

    attached: Path | None = None
    if options.attach:
        console.info(f"Attaching generated {options.output_file.name}")
        sink = artifacts or DirectoryArtifactSink(options.artifacts_dir)
        result = sink.attach(
            options.output_file,
            name=version_id,
            classifier=options.artifact.classifier,
            type=options.artifact.type,
        )
        if isinstance(result, Err):
            return result
        attached = result.value
        console.debug(f"Attached as {attached}")

    if options.copy_generated:
        console.info(
            f"Copying generated {options.output_file.name} over input {options.input_file.name}"
        )
        try:
            copy_file(options.output_file, options.input_file)
        except OSError as e:
            return Err(
                VersionTextError(
                    kind="io_failed",
                    message=f"Unable to generate replacement {options.input_file.name}: {e}",
                    hint=str(options.input_file),
                )
            )

    return Ok(attached)


def update_version_text(
    options: UpdateOptions,
    *,
    git: GitGateway,
    console: ConsoleProtocol,
    today: Callable[[], date] = date.today,
    artifacts: ArtifactSink | None = None,
) -> Result[UpdateOutcome, VersionTextError]:
    input_name = options.input_file.name

    if options.skip:
        console.info(f"{input_name} generation disabled, skipping")
        return Ok(UpdateOutcome(status="skipped"))
    if not options.input_file.is_file():
        console.info(f"No {input_name} at {options.input_file}, skipping")
        return Ok(UpdateOutcome(status="skipped"))

    text_pattern = VersionPattern.from_key(options.text_key)
    if isinstance(text_pattern, Err):
        return text_pattern
    tag_pattern = VersionPattern.from_key(options.tag_key)
    if isinstance(tag_pattern, Err):
        return tag_pattern
    matcher = IssueMatcher.from_patterns(options.issue_patterns)
    if isinstance(matcher, Err):
        return matcher
    text_key = text_pattern.value
    tag_key = tag_pattern.value

    loaded = read_document(options.input_file, text_key)
    if isinstance(loaded, Err):
        return loaded
    document = loaded.value
    document.set_sort_existing(options.sort_existing)

    current_text_version = text_key.to_version_id(options.version)
    current_tag_version = tag_key.to_version_id(options.version)

    release = document.find_release(current_text_version) or document.find_release(
        current_tag_version
    )
    if release is None:
        release = Release(version=current_text_version)
        commit_message = f"Creating new version {current_text_version} in {input_name}"
        status: UpdateStatus = "created"
    else:
        commit_message = f"Updating version {current_text_version} in {input_name}"
        status = "updated"
    commit_command = _commit_command(commit_message, options.input_file)

    console.info(f"Updating version section: {options.version}")
    prior_text_version = document.get_prior_version(current_text_version)
    if prior_text_version is None:
        # Assume it's the top of the file.
        top = document.top()
        prior_text_version = top.version if top is not None else None
    console.debug(f"Prior version in {input_name} is {prior_text_version}")

    if options.refresh_tags:
        console.info("Fetching git tags from remote ...")
        if not git.fetch_tags():
            return Err(
                VersionTextError(
                    kind="unable_to_fetch_tags",
                    message="Unable to fetch git tags",
                    hint="check the remote and network access, or drop --refresh-tags",
                )
            )

    prior_tag_id: str | None = None
    prior_tag_version: str | None = None
    if prior_text_version is not None:
        if not text_key.is_match(prior_text_version):
            return Err(
                VersionTextError(
                    kind="invalid_version_id",
                    message=(
                        f"Prior version [{prior_text_version}] is not a valid version identifier."
                        f" Does not conform to expected pattern [{text_key.key}]"
                    ),
                )
            )

        prior_tag_version = text_key.convert(prior_text_version, tag_key)
        assert prior_tag_version is not None
        found = git.find_tag_matching(prior_tag_version)
        if isinstance(found, Err):
            return Err(_git_failed(found.error))
        prior_tag_id = found.value

    if prior_tag_id is None:
        if prior_text_version is None:
            console.warning(f"No prior version in {input_name}")
        else:
            console.warning(
                f"Unable to find git tag id for prior version id [{prior_tag_version}]"
                f" (defined in {input_name} as [{prior_text_version}])"
            )
        console.info(f"Adding empty version section to top for version id [{release.version}]")
        document.replace_or_prepend(release)
        generated = _generate(
            document,
            options=options,
            console=console,
            version_id=release.version,
            artifacts=artifacts,
        )
        if isinstance(generated, Err):
            return generated
        return Ok(
            UpdateOutcome(
                status="bootstrapped",
                version_id=release.version,
                output_path=options.output_file,
                commit_command=commit_command,
                attached_path=generated.value,
            )
        )

    console.debug(f"Tag for prior version [{prior_tag_version}] is {prior_tag_id}")
    prior_commit = git.get_tag_commit_id(prior_tag_id)
    if isinstance(prior_commit, Err):
        return Err(_git_failed(prior_commit.error))
    console.debug(f"Commit ID from [{prior_tag_id}]: {prior_commit.value}")

    head = git.head_commit_id()
    if isinstance(head, Err):
        return Err(_git_failed(head.error))
    current_commit = head.value
    if options.refresh_tags:
        current_tag = git.find_tag_matching(current_tag_version)
        if isinstance(current_tag, Err):
            return Err(_git_failed(current_tag.error))
        if current_tag.value is not None:
            tagged = git.get_tag_commit_id(current_tag.value)
            if isinstance(tagged, Err):
                return Err(_git_failed(tagged.error))
            current_commit = tagged.value
    console.debug(f"Commit ID to [{current_tag_version}]: {current_commit}")

    populated = populate_issues_for_range(
        git, prior_commit.value, current_commit, release, matcher.value
    )
    if isinstance(populated, Err):
        return Err(_git_failed(populated.error))

    if release.released_on is None and options.update_date:
        release.released_on = today()

    document.replace_or_prepend(release)
    generated = _generate(
        document,
        options=options,
        console=console,
        version_id=release.version,
        artifacts=artifacts,
    )
    if isinstance(generated, Err):
        return generated

    console.success(f"{release.version}: {populated.value} new issue(s)")
    console.info("Update complete. Here's your git command (copy/paste):")
    console.print(commit_command)

    return Ok(
        UpdateOutcome(
            status=status,
            version_id=release.version,
            output_path=options.output_file,
            issues_added=populated.value,
            commit_command=commit_command,
            attached_path=generated.value,
        )
    )
