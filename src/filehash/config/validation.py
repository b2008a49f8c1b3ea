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

"""Utility helpers for validating and coercing loosely typed option values."""

from __future__ import annotations

import codecs
import hashlib
import logging
import os
from collections.abc import Iterable
from typing import Literal, cast

from .constants import MAX_AUTO_WORKERS, WORKERS_ENV

logger: logging.Logger = logging.getLogger("filehash.config")

_ENCODING_ALIASES: dict[str, str] = {"binary": "latin-1"}


def coerce_int(value: object, default: int = 0) -> int:
    """Convert a value to an integer, falling back to `default` when conversion fails."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def require_positive_int(value: object, *, context: str) -> int:
    """Coerce `value` to an integer and require it to be at least one.

    Args:
        value: Raw value to convert.
        context: Field name used in the error message.

    Returns:
        The positive integer.

    Raises:
        ValueError: If the coerced value is zero or negative.
    """
    result = coerce_int(value)
    if result < 1:
        message = f"{context} must be a positive integer (got {value!r})"
        raise ValueError(message)
    return result


def ensure_list(value: object | None) -> list[str] | None:
    """Convert a string or iterable of strings to a list of trimmed, non-empty strings.

    Args:
        value: ``None``, a single string, or an iterable of strings.

    Returns:
        A list of strings, or ``None`` if the input was ``None``.
    """
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return [stripped] if stripped else []
    if not isinstance(value, Iterable):
        return []
    result: list[str] = []
    for item in cast("Iterable[object]", value):
        if isinstance(item, str) and item.strip():
            result.append(item.strip())
    return result


def normalise_algorithm(name: str) -> str:
    """Return the canonical hashlib name for `name`.

    Raises:
        ValueError: If hashlib does not provide the algorithm, or it produces
            variable-length digests.
    """
    candidate = name.strip().lower()
    try:
        digest_size = hashlib.new(candidate).digest_size
    except (ValueError, TypeError) as exc:
        message = f"unsupported hash algorithm '{name}'"
        raise ValueError(message) from exc
    if digest_size == 0:
        message = f"hash algorithm '{name}' has a variable-length digest"
        raise ValueError(message)
    return candidate


def normalise_encoding(name: str) -> str:
    """Return a codec name usable with ``codecs.getincrementaldecoder``.

    Raises:
        ValueError: If the codec is unknown or is not a text encoding.
    """
    candidate = name.strip().lower()
    candidate = _ENCODING_ALIASES.get(candidate, candidate)
    try:
        info = codecs.lookup(candidate)
    except LookupError as exc:
        message = f"unknown encoding '{name}'"
        raise ValueError(message) from exc
    if not getattr(info, "_is_text_encoding", True):
        message = f"encoding '{name}' is not a text encoding"
        raise ValueError(message)
    return info.name


def _auto_workers() -> int:
    return min(MAX_AUTO_WORKERS, (os.cpu_count() or 1) + 4)


def _workers_from_env() -> int:
    raw = os.getenv(WORKERS_ENV)
    if raw is None or not raw.strip():
        return _auto_workers()
    value = raw.strip().lower()
    if value == "auto":
        return _auto_workers()
    parsed = coerce_int(value, default=0)
    if parsed < 1:
        logger.debug("Ignoring invalid %s=%s value", WORKERS_ENV, raw)
        return _auto_workers()
    return parsed


def resolve_concurrency(value: int | Literal["auto"] | None) -> int:
    """Resolve the bound on in-flight fingerprint operations.

    Args:
        value: Explicit bound, ``"auto"``, or ``None`` to consult
            ``FILEHASH_WORKERS``.

    Returns:
        A positive worker count.
    """
    if value is None:
        return _workers_from_env()
    if isinstance(value, str):
        if value.strip().lower() == "auto":
            return _auto_workers()
        logger.warning("Unknown concurrency setting '%s'; falling back to defaults", value)
        return _workers_from_env()
    return max(1, value)


__all__ = [
    "coerce_int",
    "ensure_list",
    "normalise_algorithm",
    "normalise_encoding",
    "require_positive_int",
    "resolve_concurrency",
]
