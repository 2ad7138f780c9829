"""The VERSION.txt update flow."""

from vtext.update.artifacts import ArtifactSink, DirectoryArtifactSink, artifact_file_name
from vtext.update.options import UpdateOptions
from vtext.update.service import UpdateOutcome, UpdateStatus, update_version_text

__all__ = [
    # artifacts
    "ArtifactSink",
    "DirectoryArtifactSink",
    "artifact_file_name",
    # options
    "UpdateOptions",
    # service
    "UpdateOutcome",
    "UpdateStatus",
    "update_version_text",
]
