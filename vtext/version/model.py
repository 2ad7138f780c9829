"""Releases and issues of a VERSION.txt.

Issue lines are read leniently and written in one canonical form: a leading
`#` on a numeric id is dropped (`#123` is the same issue as `123`, which is
how commit references are keyed) and any indentation becomes ` + `. A file
in canonical form round-trips unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

# JETTY-100, 1234, #1234
_ISSUE_ID_RE = re.compile(r"^(?:#?\d+|[A-Z][A-Z0-9_]*-\d+)$")


def looks_like_issue_id(token: str) -> bool:
    return _ISSUE_ID_RE.match(token) is not None


@dataclass(frozen=True, slots=True)
class Issue:
    """One line of a release: a ticket id and its description.

    Free-text entries have an empty id and are keyed by their text.
    """

    id: str
    text: str

    @property
    def key(self) -> str:
        return self.id or self.text

    def render(self) -> str:
        if not self.id:
            return self.text
        if not self.text:
            return self.id
        return f"{self.id} {self.text}"

    @classmethod
    def parse(cls, body: str) -> Issue:
        """Parse the part of an issue line after the `+ ` marker."""
        body = body.strip()
        token, _, rest = body.partition(" ")
        if looks_like_issue_id(token):
            return cls(id=token.lstrip("#"), text=rest.strip())
        return cls(id="", text=body)


def _empty_issues() -> list[Issue]:
    return []


@dataclass(slots=True)
class Release:
    """A VERSION.txt entry: version id, optional release date, issues."""

    version: str
    released_on: date | None = None
    issues: list[Issue] = field(default_factory=_empty_issues)

    def has_issue(self, issue: Issue) -> bool:
        return any(i.key == issue.key for i in self.issues)

    def add_issue(self, issue: Issue) -> bool:
        """Append issue unless one with the same key exists. Returns True if added."""
        if self.has_issue(issue):
            return False
        self.issues.append(issue)
        return True

    def sorted_issues(self) -> list[Issue]:
        return sorted(self.issues, key=lambda i: (i.id, i.text))
