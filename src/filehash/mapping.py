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

"""Aggregate per-file mapping entries and persist them once a group settles."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from filehash.core.model_types import LogComponent
from filehash.exceptions import FilehashError, MappingReadError
from filehash.json import as_json_object, dump_mapping
from filehash.logging_utils import structured_extra

if TYPE_CHECKING:
    from collections.abc import Mapping

    from filehash.core.type_aliases import HashMapping
    from filehash.environment import Environment
    from filehash.json import JSONValue

__all__ = ["MappingAggregator", "merge_mappings", "sort_mapping"]

logger: logging.Logger = logging.getLogger("filehash.mapping")


def merge_mappings(fresh: Mapping[str, str], existing: Mapping[str, JSONValue]) -> HashMapping:
    """Union two mappings; entries from `fresh` win on conflicting keys.

    Entries only present in `existing` are carried over as they are, whatever
    their JSON type.
    """
    merged: HashMapping = dict(fresh)
    for key, value in existing.items():
        if key not in merged:
            merged[key] = value
    return merged


def sort_mapping(mapping: Mapping[str, JSONValue]) -> HashMapping:
    """Return `mapping` with keys in ascending lexicographic order."""
    return dict(sorted(mapping.items()))


class MappingAggregator:
    """Collect mapping entries for one group and finalise them exactly once.

    Completion is tracked by counting settled files, not mapping keys, so
    files that fail or whose keys collide still let the group finish.

    Attributes:
        expected: Number of files the group will settle.
        mapping_path: Where the mapping is persisted, ``None`` to keep it in memory.
        merge: Whether to union with a mapping already at ``mapping_path``.
    """

    def __init__(self, expected: int, *, mapping_path: str | None, merge: bool, env: Environment) -> None:
        if expected < 0:
            message = f"expected must be non-negative, got {expected}"
            raise ValueError(message)
        self.expected = expected
        self.mapping_path = mapping_path
        self.merge = merge
        self.env = env
        self._entries: dict[str, str] = {}
        self._settled = 0
        self._finalized = False

    @property
    def entries(self) -> dict[str, str]:
        return dict(self._entries)

    @property
    def settled(self) -> int:
        return self._settled

    @property
    def complete(self) -> bool:
        return self._settled >= self.expected

    def record(self, key: str, value: str) -> None:
        """Store one entry; a later entry for the same key replaces the earlier one."""
        previous = self._entries.get(key)
        if previous is not None and previous != value:
            logger.warning(
                'Mapping key "%s" collides: "%s" replaced by "%s".',
                key,
                previous,
                value,
                extra=structured_extra(LogComponent.MAPPING, path=key, target=value),
            )
        self._entries[key] = value

    def settle(self) -> bool:
        """Mark one file as done and report whether it was the last one.

        Returns:
            ``True`` exactly once, for the call that settles the final file.

        Raises:
            FilehashError: If more files settle than were expected.
        """
        if self.complete:
            message = f"All {self.expected} file(s) already settled"
            raise FilehashError(message)
        self._settled += 1
        return self.complete

    def _read_existing(self, path: str) -> dict[str, JSONValue]:
        try:
            data = self.env.read_json(path)
        except json.JSONDecodeError as exc:
            raise MappingReadError(path, f"invalid JSON ({exc})") from exc
        except OSError as exc:
            raise MappingReadError(path, str(exc)) from exc
        existing = as_json_object(data)
        if existing is None:
            raise MappingReadError(path, "expected a JSON object")
        return existing

    def finalize(self) -> HashMapping:
        """Merge, sort and persist the collected entries.

        Returns:
            The sorted mapping as written (or as it would be written when no
            ``mapping_path`` is configured).

        Raises:
            FilehashError: If called twice.
            MappingReadError: If the existing mapping cannot be merged.
        """
        if self._finalized:
            message = "Mapping already finalised"
            raise FilehashError(message)
        self._finalized = True
        path = self.mapping_path
        if path is None:
            return sort_mapping(self._entries)
        with self.env.lock(path):
            mapping: HashMapping = dict(self._entries)
            if self.merge and self.env.exists(path):
                mapping = merge_mappings(mapping, self._read_existing(path))
            mapping = sort_mapping(mapping)
            self.env.write_text(path, dump_mapping(mapping))
        logger.info(
            'Hashmap "%s" saved.',
            path,
            extra=structured_extra(LogComponent.MAPPING, path=path, count=len(mapping)),
        )
        return mapping
