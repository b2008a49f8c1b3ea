# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration loading and source expansion for filehash.

Configuration lives in ``filehash.toml``, ``.filehash.toml`` or the
``[tool.filehash]`` table of ``pyproject.toml``::

    config_version = 0

    [options]
    algorithm = "sha1"
    hashlen = 8
    mapping = "{{= dest}}/assets.json"

    [[groups]]
    cwd = "static"
    dest = "dist"
    src = ["**/*.css", "**/*.js", "!vendor/**"]

Relative ``cwd``/``dest`` values stay relative in templates and are resolved
against the directory holding the configuration file when files are touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from filehash.compat import tomllib
from filehash.core.model_types import LogComponent
from filehash.core.type_aliases import SourcePath
from filehash.logging_utils import structured_extra

from .constants import CONFIG_FILENAMES, CONFIG_VERSION
from .models import (
    Config,
    ConfigModel,
    ConfigReadError,
    InvalidConfigFileError,
    UnsupportedConfigVersionError,
    group_from_model,
    options_from_model,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

logger: logging.Logger = logging.getLogger("filehash.config")

_GLOB_CHARS = frozenset("*?[")


@dataclass(slots=True, frozen=True)
class LoadedConfig:
    """Container for a loaded configuration and its source path.

    Attributes:
        config: Parsed configuration instance.
        path: Filesystem path the configuration was loaded from, or None when
            defaults are used.
    """

    config: Config
    path: Path | None


def _is_pattern(value: str) -> bool:
    return any(char in _GLOB_CHARS for char in value)


def expand_sources(base_dir: Path, patterns: Sequence[str]) -> list[SourcePath]:
    """Expand glob patterns relative to `base_dir` into an ordered source list.

    Patterns are applied in order. Matches of a pattern are sorted and appended
    unless already present; ``!pattern`` removes earlier matches. Literal paths
    are kept even when missing so the orchestrator can report them.

    Args:
        base_dir: Directory the patterns are relative to.
        patterns: Glob patterns or literal relative paths.

    Returns:
        POSIX-style source paths relative to `base_dir`.
    """
    sources: list[SourcePath] = []
    for raw in patterns:
        negate = raw.startswith("!")
        pattern = raw[1:] if negate else raw
        if not pattern:
            continue
        if negate:
            sources = [source for source in sources if not _matches(source, pattern)]
            continue
        if _is_pattern(pattern):
            matches = sorted(
                path.relative_to(base_dir).as_posix() for path in base_dir.glob(pattern) if path.is_file()
            )
        else:
            matches = [PurePosixPath(pattern).as_posix()]
        for match in matches:
            source = SourcePath(match)
            if source not in sources:
                sources.append(source)
    return sources


def _matches(source: str, pattern: str) -> bool:
    path = PurePosixPath(source)
    if path.match(pattern):
        return True
    # "dir/**" should exclude everything below dir, which PurePath.match does not do.
    if pattern.endswith("/**"):
        prefix = pattern[: -len("/**")]
        return source == prefix or source.startswith(f"{prefix}/")
    return False


def _config_search_order(base_dir: Path, explicit_path: Path | None) -> list[Path]:
    if explicit_path:
        return [explicit_path if explicit_path.is_absolute() else (base_dir / explicit_path)]
    return [base_dir / name for name in CONFIG_FILENAMES]


def _extract_payload(candidate: Path, raw_map: dict[str, object]) -> dict[str, object] | None:
    if candidate.name != "pyproject.toml":
        return raw_map
    tool_section = raw_map.get("tool")
    if not isinstance(tool_section, dict):
        return None
    section = cast("dict[str, object]", tool_section).get("filehash")
    if section is None:
        return None
    if not isinstance(section, dict):
        message = "[tool.filehash] must be a TOML table"
        raise InvalidConfigFileError(candidate, ValueError(message))
    return cast("dict[str, object]", section)


def config_from_mapping(payload: dict[str, object], *, root: Path) -> Config:
    """Validate a raw configuration mapping and expand its groups.

    Args:
        payload: Raw configuration data (the contents of a config file).
        root: Directory relative group paths are resolved against.

    Returns:
        The runtime configuration.

    Raises:
        UnsupportedConfigVersionError: If ``config_version`` is not supported.
        ValidationError: If the payload fails validation.
    """
    version = payload.get("config_version", CONFIG_VERSION)
    if isinstance(version, int) and not isinstance(version, bool) and version != CONFIG_VERSION:
        raise UnsupportedConfigVersionError(version, CONFIG_VERSION)
    model = ConfigModel.model_validate(payload)
    groups = []
    for group_model in model.groups:
        base_dir = root / group_model.cwd if group_model.cwd else root
        sources = expand_sources(base_dir, group_model.src)
        if not sources:
            logger.warning(
                "Group %s matched no source files",
                group_model.cwd or ".",
                extra=structured_extra(LogComponent.CONFIG, path=base_dir, count=0),
            )
        groups.append(group_from_model(group_model, model.options, sources))
    return Config(options=options_from_model(model.options), groups=groups, root=root)


def _load_candidate(candidate: Path, *, explicit: bool) -> LoadedConfig | None:
    if not candidate.exists():
        if explicit:
            raise ConfigReadError(candidate, FileNotFoundError(candidate))
        return None
    try:
        raw_map: dict[str, object] = tomllib.loads(candidate.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigReadError(candidate, exc) from exc

    payload = _extract_payload(candidate, raw_map)
    if payload is None:
        if explicit:
            message = f"{candidate.name} does not define a [tool.filehash] section"
            raise InvalidConfigFileError(candidate, ValueError(message))
        return None

    root = candidate.parent.resolve()
    try:
        config = config_from_mapping(payload, root=root)
    except ValidationError as exc:
        raise InvalidConfigFileError(candidate, exc) from exc
    logger.debug("Loaded configuration from %s", candidate)
    return LoadedConfig(config=config, path=candidate.resolve())


def load_config_with_metadata(explicit_path: Path | None = None, *, base_dir: Path | None = None) -> LoadedConfig:
    """Load filehash configuration along with the path it came from.

    Without `explicit_path`, ``filehash.toml``, ``.filehash.toml`` and
    ``pyproject.toml`` are tried in that order inside `base_dir`; the first
    file holding filehash configuration wins. When none does, an empty
    configuration with default options is returned.

    Args:
        explicit_path: Configuration file to load; must exist.
        base_dir: Directory searched for configuration files (default: cwd).

    Returns:
        LoadedConfig: Parsed configuration and the path it originated from.

    Raises:
        ConfigReadError: If a configuration file cannot be read or parsed.
        InvalidConfigFileError: If a configuration file fails validation.
    """
    search_root = (base_dir or Path.cwd()).resolve()
    for candidate in _config_search_order(search_root, explicit_path):
        loaded = _load_candidate(candidate, explicit=explicit_path is not None)
        if loaded is not None:
            return loaded
    return LoadedConfig(config=Config(root=search_root), path=None)


def load_config(explicit_path: Path | None = None) -> Config:
    """Load filehash configuration from a TOML file or use defaults.

    Args:
        explicit_path: Optional explicit path to a configuration file.

    Returns:
        The runtime configuration.
    """
    return load_config_with_metadata(explicit_path).config


__all__ = [
    "LoadedConfig",
    "config_from_mapping",
    "expand_sources",
    "load_config",
    "load_config_with_metadata",
]
