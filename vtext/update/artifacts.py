"""Attaching the generated VERSION.txt as a build artifact."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vtext.core.result import Err, Ok, Result
from vtext.platform.files import copy_file
from vtext.version.errors import VersionTextError


class ArtifactSink(Protocol):
    def attach(
        self, path: Path, *, name: str, classifier: str, type: str
    ) -> Result[Path, VersionTextError]: ...


@dataclass(frozen=True, slots=True)
class DirectoryArtifactSink:
    """Publishes attachments as `<name>-<classifier>.<type>` in a directory."""

    directory: Path

    def attach(
        self, path: Path, *, name: str, classifier: str, type: str
    ) -> Result[Path, VersionTextError]:
        target = self.directory / artifact_file_name(name, classifier=classifier, type=type)
        try:
            copy_file(path, target)
        except OSError as e:
            return Err(
                VersionTextError(
                    kind="io_failed",
                    message=f"failed to attach {path.name}: {e}",
                    hint=str(target),
                )
            )
        return Ok(target)


def artifact_file_name(name: str, *, classifier: str, type: str) -> str:
    stem = f"{name}-{classifier}" if classifier else name
    return f"{stem}.{type}" if type else stem
