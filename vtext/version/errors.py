"""Error payload shared by the version, git and update layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

VersionTextErrorKind = Literal[
    "invalid_input",
    "invalid_pattern",
    "malformed_document",
    "invalid_version_id",
    "unable_to_fetch_tags",
    "git_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class VersionTextError:
    """Canonical error for a VERSION.txt update.

    Rendered by the CLI as `error: <message>` plus an optional hint line.
    """

    kind: VersionTextErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
