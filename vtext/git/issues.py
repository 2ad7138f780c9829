"""Issue references in commit messages.

Each line of a commit message is tested against an ordered list of regular
expressions with named groups `id` and `text`; the first one that matches
yields an Issue. Recognised by default:

    Issue #123 - Fix the thing      -> 123
    Fixes #123: Fix the thing       -> 123
    [JETTY-100] Fix the thing       -> JETTY-100
    JETTY-100 - Fix the thing       -> JETTY-100
    JETTY-100: Fix the thing        -> JETTY-100
    Bug 12345 - Fix the thing       -> 12345

An unbracketed project key must be followed by a `-` or `:` separator or
stand alone on its line. `UTF-8 support` and `CVE-2021-28165 fix` match
nothing.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from vtext.core.result import Err, Ok, Result
from vtext.git.repository import Commit, GitError, GitGateway
from vtext.version.errors import VersionTextError
from vtext.version.model import Issue, Release

DEFAULT_ISSUE_PATTERNS: tuple[str, ...] = (
    r"^(?:(?i:issue|fix(?:es|ed)?|close[sd]?|resolve[sd]?)\s+)?#(?P<id>\d+)\b[\s:-]*(?P<text>.*)$",
    r"^\[(?P<id>[A-Z][A-Z0-9_]+-\d+)\][\s:-]*(?P<text>.*)$",
    r"^(?P<id>[A-Z][A-Z0-9_]+-\d+)(?:\s*[:-]\s+(?P<text>.*))?$",
    r"^(?i:bug)\s+#?(?P<id>\d+)\b[\s:-]*(?P<text>.*)$",
)

_BULLETS = "-*+ \t"

__all__ = [
    "DEFAULT_ISSUE_PATTERNS",
    "IssueMatcher",
    "populate_issues_for_range",
]


@dataclass(frozen=True, slots=True)
class IssueMatcher:
    patterns: tuple[re.Pattern[str], ...]

    @classmethod
    def default(cls) -> IssueMatcher:
        return cls(tuple(re.compile(p) for p in DEFAULT_ISSUE_PATTERNS))

    @classmethod
    def from_patterns(cls, patterns: Sequence[str]) -> Result[IssueMatcher, VersionTextError]:
        """Compile custom patterns; an empty sequence selects the defaults."""
        if not patterns:
            return Ok(cls.default())

        compiled: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                rx = re.compile(pattern)
            except re.error as e:
                return Err(
                    VersionTextError(
                        kind="invalid_input",
                        message=f"invalid issue pattern: {e}",
                        hint=pattern,
                    )
                )
            if "id" not in rx.groupindex:
                return Err(
                    VersionTextError(
                        kind="invalid_input",
                        message="issue pattern needs a named group 'id'",
                        hint=pattern,
                    )
                )
            compiled.append(rx)
        return Ok(cls(tuple(compiled)))

    def match_line(self, line: str) -> Issue | None:
        line = line.strip().lstrip(_BULLETS).strip()
        if not line:
            return None
        for rx in self.patterns:
            m = rx.match(line)
            if m is None:
                continue
            issue_id = (m.group("id") or "").strip()
            if not issue_id:
                continue
            text = m.groupdict().get("text") or ""
            return Issue(id=issue_id, text=text.strip())
        return None

    def issues_in(self, commit: Commit) -> Iterator[Issue]:
        """Issues referenced by a commit, in message line order."""
        subject = commit.subject
        for line in commit.message.splitlines():
            issue = self.match_line(line)
            if issue is None:
                continue
            if not issue.text and line.strip() != subject:
                issue = Issue(id=issue.id, text=subject)
            yield issue


def populate_issues_for_range(
    git: GitGateway,
    from_commit: str,
    to_commit: str,
    release: Release,
    matcher: IssueMatcher,
) -> Result[int, GitError]:
    """Append issues from commits in from_commit..to_commit to release.

    Commits are walked newest first. Issues already on the release keep
    their place; re-running on the same range adds nothing.

    Returns:
        Ok(number of issues added), or Err(GitError) if the range cannot be listed
    """
    commits = git.commits_in_range(from_commit, to_commit)
    if isinstance(commits, Err):
        return commits

    added = 0
    for commit in commits.value:
        for issue in matcher.issues_in(commit):
            if release.add_issue(issue):
                added += 1
    return Ok(added)
