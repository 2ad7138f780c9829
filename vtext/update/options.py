from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vtext.core.config import ArtifactConfig, VersionTextConfig


@dataclass(frozen=True, slots=True)
class UpdateOptions:
    """Everything one `vtext update` run needs, resolved up front.

    Paths are absolute (resolved against the project base directory).
    """

    version: str
    basedir: Path
    input_file: Path
    output_file: Path
    text_key: str
    tag_key: str
    sort_existing: bool = False
    refresh_tags: bool = False
    update_date: bool = False
    copy_generated: bool = False
    attach: bool = False
    skip: bool = False
    artifact: ArtifactConfig = field(default_factory=ArtifactConfig)
    issue_patterns: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: VersionTextConfig, *, basedir: Path, version: str) -> UpdateOptions:
        return cls(
            version=version,
            basedir=basedir,
            input_file=basedir / config.input,
            output_file=basedir / config.output,
            text_key=config.text_key,
            tag_key=config.tag_key,
            sort_existing=config.sort_existing,
            refresh_tags=config.refresh_tags,
            update_date=config.update_date,
            copy_generated=config.copy_generated,
            attach=config.attach,
            skip=config.skip,
            artifact=config.artifact,
            issue_patterns=config.issue_patterns,
        )

    @property
    def artifacts_dir(self) -> Path:
        return self.basedir / self.artifact.directory
