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

"""Runtime records passed between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from filehash.config.models import HashOptions
    from filehash.core.type_aliases import Fingerprint, HashMapping, SourcePath
    from filehash.exceptions import FingerprintError


def _default_sources() -> list[SourcePath]:
    return []


@dataclass(slots=True)
class FileGroup:
    """A set of source files sharing a base directory and destination.

    Attributes:
        cwd: Optional base directory the sources are relative to.
        dest: Optional destination directory for fingerprinted copies.
        sources: Ordered source paths, relative to ``cwd`` when it is set.
        options: Per-group options; ``None`` uses the caller's options.
    """

    cwd: str | None = None
    dest: str | None = None
    sources: list[SourcePath] = field(default_factory=_default_sources)
    options: HashOptions | None = None


@dataclass(slots=True, frozen=True)
class FileRecord:
    """A source file whose fingerprint has been computed."""

    source: SourcePath
    resolved: str
    fingerprint: Fingerprint


@dataclass(slots=True, frozen=True)
class DerivedPaths:
    """Names derived from one ``FileRecord``.

    Attributes:
        target: On-disk copy destination, or ``None`` when the group has no ``dest``.
        key: Mapping key, or ``None`` when no mapping is written.
        value: Mapping value, or ``None`` when no mapping is written.
    """

    target: str | None
    key: str | None
    value: str | None


def _default_failures() -> dict[SourcePath, FingerprintError]:
    return {}


@dataclass(slots=True)
class GroupResult:
    """Outcome of processing one ``FileGroup``.

    Attributes:
        group: The processed group.
        mapping: Sorted mapping contribution (merged when requested).
        mapping_path: Path the mapping was written to, if any.
        processed: Number of files fingerprinted successfully.
        skipped: Number of files settled without a fingerprint.
        failures: Per-source errors collected while fingerprinting.
    """

    group: FileGroup
    mapping: HashMapping
    mapping_path: str | None = None
    processed: int = 0
    skipped: int = 0
    failures: dict[SourcePath, FingerprintError] = field(default_factory=_default_failures)


__all__ = ["DerivedPaths", "FileGroup", "FileRecord", "GroupResult"]
