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

"""Property-based tests for derived names and group outcomes."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from filehash.api import hash_group
from filehash.config.constants import DEFAULT_RENAME
from filehash.core.type_aliases import SourcePath
from filehash.core.types import FileGroup
from filehash.environment import LocalFileSystem
from filehash.naming import derive_name, split_name
from tests.property_based.strategies import file_names, path_segments

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.property

_FINGERPRINTS = st.from_regex(r"[0-9a-f]{1,32}", fullmatch=True)


@given(segments=path_segments(), name=file_names(), fingerprint=_FINGERPRINTS)
def test_default_rename_inserts_fingerprint_before_extension(
    segments: list[str],
    name: tuple[str, str],
    fingerprint: str,
) -> None:
    basename, extname = name
    source = "/".join([*segments, f"{basename}{extname}"])
    renamed = derive_name(DEFAULT_RENAME, source, fingerprint, cwd=None, dest=None)
    assert renamed == posixpath.join(*segments, f"{basename}.{fingerprint}{extname}")


@given(
    segments=path_segments(),
    name=file_names().filter(lambda pair: pair[1] != ""),
    fingerprint=_FINGERPRINTS,
)
def test_default_rename_preserves_directory_and_extension(
    segments: list[str],
    name: tuple[str, str],
    fingerprint: str,
) -> None:
    basename, extname = name
    source = "/".join([*segments, f"{basename}{extname}"])
    renamed = derive_name(DEFAULT_RENAME, source, fingerprint, cwd=None, dest=None)
    source_dir, _, source_ext = split_name(source)
    renamed_dir, renamed_base, renamed_ext = split_name(renamed)
    assert (renamed_dir, renamed_ext) == (source_dir, source_ext)
    assert renamed_base == f"{basename}.{fingerprint}"


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture], max_examples=25)
@given(names=st.lists(file_names(), min_size=1, max_size=5, unique=True))
def test_group_of_missing_sources_yields_empty_mapping(tmp_path: Path, names: list[tuple[str, str]]) -> None:
    sources = [SourcePath(f"missing/{basename}{extname}") for basename, extname in names]
    result = hash_group(FileGroup(dest="out", sources=sources), env=LocalFileSystem(tmp_path))
    assert result.mapping == {}
    assert result.processed == 0
    assert result.skipped == len(sources)
    assert not (tmp_path / "out").exists()
