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

"""Shared Hypothesis strategies for property-based tests."""

from __future__ import annotations

from hypothesis import strategies as st

__all__ = [
    "algorithms",
    "file_contents",
    "file_names",
    "hashlens",
    "mappings",
    "path_segments",
    "salts",
]

_SEGMENT = r"[A-Za-z0-9_-]{1,12}"


def file_contents(min_size: int = 0, max_size: int = 2048) -> st.SearchStrategy[bytes]:
    """Return a strategy yielding arbitrary file payloads."""
    return st.binary(min_size=min_size, max_size=max_size)


def algorithms() -> st.SearchStrategy[str]:
    """Fixed-length hashlib algorithms available on every platform."""
    return st.sampled_from(["md5", "sha1", "sha256", "sha512", "blake2b", "blake2s", "sha3_256"])


def hashlens() -> st.SearchStrategy[int | None]:
    """Truncation lengths, including ``None`` and values beyond any digest length."""
    return st.one_of(st.none(), st.integers(min_value=1, max_value=200))


def salts() -> st.SearchStrategy[str | None]:
    return st.one_of(st.none(), st.text(min_size=1, max_size=16))


def path_segments(min_size: int = 0, max_size: int = 3) -> st.SearchStrategy[list[str]]:
    """Lists of directory names safe to join with ``/``."""
    return st.lists(st.from_regex(_SEGMENT, fullmatch=True), min_size=min_size, max_size=max_size)


def file_names() -> st.SearchStrategy[tuple[str, str]]:
    """``(basename, extname)`` pairs where ``extname`` is empty or starts with a dot.

    Returns:
        Strategy producing names such as ``("site", ".css")`` or ``("Makefile", "")``.
    """
    basename = st.from_regex(r"[A-Za-z0-9_-]{1,12}", fullmatch=True)
    extname = st.one_of(st.just(""), st.from_regex(r"\.[A-Za-z0-9]{1,5}", fullmatch=True))
    return st.tuples(basename, extname)


def mappings(max_size: int = 12) -> st.SearchStrategy[dict[str, str]]:
    """Small string-to-string mappings."""
    key = st.text(min_size=1, max_size=10)
    return st.dictionaries(key, st.text(max_size=10), max_size=max_size)
