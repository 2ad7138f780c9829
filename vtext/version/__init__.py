"""VERSION.txt data model: version templates, releases, documents."""

from vtext.version.document import (
    VersionDocument,
    format_date,
    parse_document,
    read_document,
    write_document,
)
from vtext.version.errors import VersionTextError, VersionTextErrorKind
from vtext.version.model import Issue, Release
from vtext.version.pattern import PLACEHOLDER, TagLister, VersionPattern

__all__ = [
    # document
    "VersionDocument",
    "format_date",
    "parse_document",
    "read_document",
    "write_document",
    # errors
    "VersionTextError",
    "VersionTextErrorKind",
    # model
    "Issue",
    "Release",
    # pattern
    "PLACEHOLDER",
    "TagLister",
    "VersionPattern",
]
