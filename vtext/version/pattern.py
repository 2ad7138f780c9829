"""Version identifier templates.

A template such as `jetty-VERSION` holds exactly one `VERSION` placeholder.
Substituting a raw version gives the identifier used in VERSION.txt headers
and git tag names (`9.4.1` -> `jetty-9.4.1`). Two templates let the document
and the tags use different prefixes while sharing the same raw version.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from vtext.core.result import Err, Ok, Result
from vtext.version.errors import VersionTextError

PLACEHOLDER = "VERSION"

# 9.4.1, 1.0, 9.4.1-SNAPSHOT, 9.4.1.v20170120, 10.0.0.beta2
_ORDINAL_RE = re.compile(
    r"(?P<numbers>\d+(?:\.\d+)*)(?:[.-](?P<qualifier>[0-9A-Za-z]+(?:[.-][0-9A-Za-z]+)*))?"
)

__all__ = ["PLACEHOLDER", "TagLister", "VersionPattern", "is_ordinal_version"]


class TagLister(Protocol):
    """The tag-listing capability of the git gateway."""

    def list_tags(self) -> Result[list[str], object]: ...


def is_ordinal_version(raw: str) -> bool:
    """True if raw looks like `1.2.3` with an optional qualifier."""
    return _ORDINAL_RE.fullmatch(raw) is not None


@dataclass(frozen=True, slots=True)
class VersionPattern:
    """A parsed version template: literal prefix + placeholder + literal suffix."""

    key: str
    prefix: str
    suffix: str

    @classmethod
    def from_key(cls, key: str) -> Result[VersionPattern, VersionTextError]:
        count = key.count(PLACEHOLDER)
        if count != 1:
            return Err(
                VersionTextError(
                    kind="invalid_pattern",
                    message=f"version key [{key}] must contain exactly one {PLACEHOLDER} placeholder",
                    hint=f"found {count}",
                )
            )
        prefix, suffix = key.split(PLACEHOLDER, 1)
        return Ok(cls(key=key, prefix=prefix, suffix=suffix))

    def to_version_id(self, raw: str) -> str:
        """Substitute raw into the placeholder. raw is not validated."""
        return f"{self.prefix}{raw}{self.suffix}"

    def _substituted(self, candidate: str) -> str | None:
        if len(candidate) <= len(self.prefix) + len(self.suffix):
            return None
        if not candidate.startswith(self.prefix) or not candidate.endswith(self.suffix):
            return None
        return candidate[len(self.prefix) : len(candidate) - len(self.suffix)]

    def matches_literals(self, candidate: str) -> bool:
        """True if candidate carries the template's prefix and suffix around a non-empty value.

        Weaker than is_match: `jetty-bogus` has the literals of `jetty-VERSION`
        but is not a valid identifier.
        """
        return self._substituted(candidate) is not None

    def raw_version(self, candidate: str) -> str | None:
        """Recover the raw version from a conforming identifier, else None."""
        raw = self._substituted(candidate)
        if raw is None or not is_ordinal_version(raw):
            return None
        return raw

    def is_match(self, candidate: str) -> bool:
        """True iff candidate is prefix + ordinal version + suffix, anchored at both ends."""
        return self.raw_version(candidate) is not None

    def convert(self, candidate: str, other: VersionPattern) -> str | None:
        """Re-render a conforming identifier under another template."""
        raw = self.raw_version(candidate)
        if raw is None:
            return None
        return other.to_version_id(raw)

    def sort_key(self, candidate: str) -> tuple[tuple[int, ...], int, str]:
        """Ordering key for conforming identifiers.

        Numeric components compare as integers; a plain release sorts after
        qualified builds of the same numbers (`1.0-RC1` < `1.0`).
        Non-conforming identifiers sort first.
        """
        raw = self.raw_version(candidate)
        if raw is None:
            return ((), 0, candidate)
        m = _ORDINAL_RE.fullmatch(raw)
        assert m is not None
        numbers = tuple(int(n) for n in m.group("numbers").split("."))
        qualifier = m.group("qualifier")
        if qualifier is None:
            return (numbers, 1, "")
        return (numbers, 0, qualifier)

    def latest(self, candidates: Iterable[str]) -> str | None:
        """Highest conforming identifier among candidates."""
        matching = [c for c in candidates if self.is_match(c)]
        if not matching:
            return None
        return max(matching, key=self.sort_key)

    def get_last_version(self, tags: TagLister) -> str | None:
        """Most recent tag conforming to this template.

        Returns None when listing fails or no tag conforms; callers treat
        that as "no version discovered".
        """
        listed = tags.list_tags()
        if isinstance(listed, Err):
            return None
        return self.latest(listed.value)

    def __str__(self) -> str:
        return self.key
