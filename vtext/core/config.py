"""Typed configuration loading.

Settings live in the `[tool.vtext]` table of `pyproject.toml` (or at the root
of a standalone TOML file). The project version is taken from
`[project].version` when present.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "ArtifactConfig",
    "ConfigError",
    "VersionTextConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_INPUT",
    "DEFAULT_OUTPUT",
    "DEFAULT_VERSION_KEY",
]

DEFAULT_INPUT = "VERSION.txt"
DEFAULT_OUTPUT = "target/VERSION.txt"
DEFAULT_VERSION_KEY = "jetty-VERSION"

DEFAULT_ARTIFACTS_DIR = "target/artifacts"
DEFAULT_CLASSIFIER = "version"
DEFAULT_ARTIFACT_TYPE = "txt"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ArtifactConfig:
    """Where an attached VERSION.txt is published."""

    directory: str = DEFAULT_ARTIFACTS_DIR
    classifier: str = DEFAULT_CLASSIFIER
    type: str = DEFAULT_ARTIFACT_TYPE


@dataclass(frozen=True, slots=True)
class VersionTextConfig:
    """Settings for `vtext update`.

    Paths are relative to the project base directory.
    """

    input: str = DEFAULT_INPUT
    output: str = DEFAULT_OUTPUT
    text_key: str = DEFAULT_VERSION_KEY
    tag_key: str = DEFAULT_VERSION_KEY
    sort_existing: bool = False
    refresh_tags: bool = False
    update_date: bool = False
    copy_generated: bool = False
    attach: bool = False
    skip: bool = False
    artifact: ArtifactConfig = field(default_factory=ArtifactConfig)
    issue_patterns: tuple[str, ...] = ()
    project_version: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> VersionTextConfig:
        """Create config from a parsed TOML document."""
        tool: StrDict = get_table(data, "tool") or {}
        section: Mapping[str, object] = get_table(tool, "vtext") or data
        project: StrDict = get_table(data, "project") or {}

        patterns = get_str_list(section, "issue_patterns") or []

        return cls(
            input=get_str(section, "input") or DEFAULT_INPUT,
            output=get_str(section, "output") or DEFAULT_OUTPUT,
            text_key=get_str(section, "text_key") or DEFAULT_VERSION_KEY,
            tag_key=get_str(section, "tag_key") or DEFAULT_VERSION_KEY,
            sort_existing=bool(get_bool(section, "sort_existing")),
            refresh_tags=bool(get_bool(section, "refresh_tags")),
            update_date=bool(get_bool(section, "update_date")),
            copy_generated=bool(get_bool(section, "copy_generated")),
            attach=bool(get_bool(section, "attach")),
            skip=bool(get_bool(section, "skip")),
            artifact=ArtifactConfig(
                directory=get_str(section, "artifacts_dir") or DEFAULT_ARTIFACTS_DIR,
                classifier=get_str(section, "classifier") or DEFAULT_CLASSIFIER,
                type=get_str(section, "type") or DEFAULT_ARTIFACT_TYPE,
            ),
            issue_patterns=tuple(patterns),
            project_version=get_str(project, "version"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[VersionTextConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to pyproject.toml or a standalone TOML file

    Returns:
        Ok(VersionTextConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(VersionTextConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[VersionTextConfig, ConfigError]:
    """Load config, falling back to defaults when the file does not exist.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(VersionTextConfig())
    return load_config(path)
