"""VERSION.txt parsing and rendering.

Layout (newest release first, blocks separated by a blank line):

    jetty-9.4.1 - 20 January 2017
     + JETTY-100 Fix the thing
     + 1234 Another fix

    jetty-9.4.0
     + Free text entry without an id

Header lines start at column 0 and hold the version id, optionally followed
by ` - ` and the release date. A header only needs the template's literal
prefix and suffix to be recognised; full conformance is checked by the update
flow. The date is taken after the last ` - `, so templates may themselves
contain ` - `. Issue lines are indented and start with `+`; see
vtext.version.model for how they are normalized. render() output parses
back to an equal document.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime
from pathlib import Path

from vtext.core.result import Err, Ok, Result
from vtext.platform.files import atomic_write_text
from vtext.version.errors import VersionTextError
from vtext.version.model import Issue, Release
from vtext.version.pattern import VersionPattern

__all__ = [
    "DATE_FORMAT",
    "VersionDocument",
    "format_date",
    "parse_document",
    "read_document",
    "write_document",
]

DATE_FORMAT = "%d %B %Y"
_INPUT_DATE_FORMATS = (DATE_FORMAT, "%d %b %Y", "%Y-%m-%d")
_DATE_SEPARATOR = " - "
_ISSUE_MARKER = "+"


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def _parse_date(text: str) -> date | None:
    for fmt in _INPUT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


class VersionDocument:
    """Ordered releases of a VERSION.txt, newest first."""

    def __init__(self, releases: list[Release] | None = None) -> None:
        self._releases: list[Release] = list(releases or [])
        self._sort_existing = False
        self._merged_version: str | None = None

    @property
    def releases(self) -> list[Release]:
        return list(self._releases)

    @property
    def merged_version(self) -> str | None:
        """Version id merged by replace_or_prepend during this run."""
        return self._merged_version

    def __len__(self) -> int:
        return len(self._releases)

    def __iter__(self) -> Iterator[Release]:
        return iter(self._releases)

    def versions(self) -> list[str]:
        return [r.version for r in self._releases]

    def top(self) -> Release | None:
        return self._releases[0] if self._releases else None

    def find_release(self, version: str) -> Release | None:
        for release in self._releases:
            if release.version == version:
                return release
        return None

    def get_prior_version(self, version: str) -> str | None:
        """Version id listed right after `version` (the next older one).

        None when `version` is absent or is the last entry.
        """
        for idx, release in enumerate(self._releases):
            if release.version != version:
                continue
            if idx + 1 < len(self._releases):
                return self._releases[idx + 1].version
            return None
        return None

    def replace_or_prepend(self, release: Release) -> None:
        """Replace the entry with the same version in place, or insert it at the top."""
        self._merged_version = release.version
        for idx, existing in enumerate(self._releases):
            if existing.version == release.version:
                self._releases[idx] = release
                return
        self._releases.insert(0, release)

    def set_sort_existing(self, enabled: bool) -> None:
        """Sort issues by id when rendering every release except the merged one."""
        self._sort_existing = enabled

    def render(self) -> str:
        blocks: list[str] = []
        for release in self._releases:
            header = release.version
            if release.released_on is not None:
                header += f"{_DATE_SEPARATOR}{format_date(release.released_on)}"

            issues = release.issues
            if self._sort_existing and release.version != self._merged_version:
                issues = release.sorted_issues()

            lines = [header]
            lines.extend(f" {_ISSUE_MARKER} {issue.render()}" for issue in issues)
            blocks.append("\n".join(lines))

        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"


def _malformed(message: str, *, source: str, lineno: int) -> Err[VersionTextError]:
    return Err(
        VersionTextError(
            kind="malformed_document",
            message=message,
            hint=f"{source}:{lineno}",
        )
    )


def parse_document(
    text: str,
    pattern: VersionPattern,
    *,
    source: str = "VERSION.txt",
) -> Result[VersionDocument, VersionTextError]:
    """Parse VERSION.txt content into a VersionDocument."""
    releases: list[Release] = []
    seen: set[str] = set()
    current: Release | None = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue

        if line[0].isspace():
            stripped = line.strip()
            if not stripped.startswith(_ISSUE_MARKER):
                return _malformed(f"unexpected line: {stripped!r}", source=source, lineno=lineno)
            if current is None:
                return _malformed(
                    "issue line before any version header", source=source, lineno=lineno
                )
            body = stripped[len(_ISSUE_MARKER) :].strip()
            if body:
                current.add_issue(Issue.parse(body))
            continue

        header = line.rstrip()
        version, sep, date_text = header.rpartition(_DATE_SEPARATOR)
        released_on: date | None = None
        if not sep:
            version = header
        else:
            released_on = _parse_date(date_text.strip())
            if released_on is None:
                # ` - ` is part of the template, not a date separator
                if not pattern.is_match(header):
                    return _malformed(
                        f"invalid release date for [{version.strip()}]: {date_text.strip()!r}",
                        source=source,
                        lineno=lineno,
                    )
                version = header

        version = version.strip()
        if not pattern.matches_literals(version):
            return _malformed(
                f"line is not a version header for pattern [{pattern.key}]: {version!r}",
                source=source,
                lineno=lineno,
            )
        if version in seen:
            return _malformed(f"duplicate version header [{version}]", source=source, lineno=lineno)

        seen.add(version)
        current = Release(version=version, released_on=released_on)
        releases.append(current)

    return Ok(VersionDocument(releases))


def read_document(path: Path, pattern: VersionPattern) -> Result[VersionDocument, VersionTextError]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            VersionTextError(
                kind="io_failed",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )
    return parse_document(text, pattern, source=path.name)


def write_document(document: VersionDocument, path: Path) -> Result[None, VersionTextError]:
    try:
        atomic_write_text(path, document.render())
    except OSError as e:
        return Err(
            VersionTextError(
                kind="io_failed",
                message=f"Unable to generate replacement {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(None)
