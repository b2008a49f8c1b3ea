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

"""Enumerations shared by the filehash pipeline, configuration and CLI."""

from __future__ import annotations

from filehash.compat import StrEnum


class HashMode(StrEnum):
    """How a file's fingerprint is produced.

    Attributes:
        CONTENT: Digest of the file bytes.
        ETAG: Rendered from file metadata (size, modification time, ...).
    """

    CONTENT = "content"
    ETAG = "etag"


class FailurePolicy(StrEnum):
    """What happens to a group when a file cannot be fingerprinted.

    Attributes:
        SKIP: Log the error, leave the file out of the mapping and keep going.
        FAIL: Let every file settle, then fail the whole group.
    """

    SKIP = "skip"
    FAIL = "fail"

    @classmethod
    def from_str(cls, raw: str) -> FailurePolicy:
        """Create a FailurePolicy from a string value.

        Args:
            raw: String representation of the policy.

        Returns:
            FailurePolicy enum value.

        Raises:
            ValueError: If the string does not match any policy.
        """
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown failure policy '{raw}'"
            raise ValueError(msg) from exc


class LogFormat(StrEnum):
    TEXT = "text"
    JSON = "json"

    @classmethod
    def from_str(cls, raw: str) -> LogFormat:
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown log format '{raw}'"
            raise ValueError(msg) from exc


class LogComponent(StrEnum):
    """Enumeration of loggable pipeline components."""

    CLI = "cli"
    CONFIG = "config"
    FINGERPRINT = "fingerprint"
    MAPPING = "mapping"
    MATERIALIZE = "materialize"
    GROUP = "group"


__all__ = ["FailurePolicy", "HashMode", "LogComponent", "LogFormat"]
