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

"""Common exception hierarchy for filehash."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

__all__ = [
    "FilehashError",
    "FilehashTypeError",
    "FilehashValidationError",
    "FingerprintError",
    "GroupProcessingError",
    "MappingReadError",
    "MaterializeError",
    "TemplateSyntaxError",
]


class FilehashError(Exception):
    """Base error for all filehash exceptions."""


class FilehashValidationError(FilehashError, ValueError):
    """Raised when input data fails validation checks."""


class FilehashTypeError(FilehashError, TypeError):
    """Raised when input data has an unexpected type."""


class TemplateSyntaxError(FilehashValidationError):
    """Raised when a template contains an expression the renderer cannot evaluate."""

    def __init__(self, template: str, expression: str) -> None:
        """Initialize the exception with the offending template and expression.

        Args:
            template: Full template text.
            expression: The expression found between the delimiters.
        """
        self.template = template
        self.expression = expression
        super().__init__(f"Invalid template expression '{expression}' in {template!r}")


class FingerprintError(FilehashError):
    """Raised when a file cannot be stat'ed or read while computing its fingerprint."""

    def __init__(self, path: Path | str, error: Exception) -> None:
        """Initialize the exception with the file path and the underlying error.

        Args:
            path: File whose fingerprint could not be produced.
            error: The underlying I/O exception.
        """
        self.path = path
        self.error = error
        super().__init__(f"Unable to fingerprint {path}: {error}")


class MappingReadError(FilehashError):
    """Raised when an existing mapping file cannot be merged."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to merge mapping {path}: {reason}")


class GroupProcessingError(FilehashError):
    """Raised when a file group is configured to fail on unreadable sources."""

    def __init__(self, failures: Mapping[str, FingerprintError]) -> None:
        """Initialize the exception with every failure collected for the group.

        Args:
            failures: Mapping of source path to the error raised for it.
        """
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"{len(self.failures)} file(s) could not be fingerprinted: {names}")


class MaterializeError(FilehashError):
    """Raised when a fingerprinted copy cannot be written or its source removed."""

    def __init__(self, source: str, target: str, error: Exception) -> None:
        self.source = source
        self.target = target
        self.error = error
        super().__init__(f"Unable to materialise {source} as {target}: {error}")
