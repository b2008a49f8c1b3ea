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

"""Unit tests for content hashes and metadata etags."""

from __future__ import annotations

import hashlib
import io
import logging
import os
from typing import TYPE_CHECKING

import pytest

from filehash.config import build_options
from filehash.core.model_types import HashMode
from filehash.environment import LocalFileSystem
from filehash.exceptions import FingerprintError
from filehash.fingerprint import Fingerprinter, etag_from_stat, hash_stream, stat_variables
from filehash.template import TemplateRenderer

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.unit

MTIME_NS = 1_700_000_000_123_456_789


def _md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def test_hash_stream_defaults_to_truncated_md5() -> None:
    content = b"body { color: red; }\n"
    assert hash_stream(io.BytesIO(content), build_options()) == _md5(content)[:10]


def test_hash_stream_honours_algorithm_and_full_length() -> None:
    content = b"console.log('hi');"
    options = build_options(algorithm="sha256", hashlen=None)
    assert hash_stream(io.BytesIO(content), options) == hashlib.sha256(content).hexdigest()


def test_hashlen_longer_than_digest_keeps_full_digest() -> None:
    fingerprint = hash_stream(io.BytesIO(b"x"), build_options(hashlen=500))
    assert fingerprint == _md5(b"x")
    assert len(fingerprint) == 32


def test_salt_is_appended_after_content() -> None:
    options = build_options(salt="v2", hashlen=None)
    assert hash_stream(io.BytesIO(b"abc"), options) == _md5(b"abcv2")
    assert hash_stream(io.BytesIO(b"abc"), options) != hash_stream(io.BytesIO(b"abc"), build_options(hashlen=None))


def test_encoding_hashes_decoded_text_as_utf8() -> None:
    text = "naïve café"
    options = build_options(encoding="utf-16", hashlen=None)
    assert hash_stream(io.BytesIO(text.encode("utf-16")), options) == _md5(text.encode("utf-8"))


def test_multibyte_sequences_may_span_chunks() -> None:
    text = "héllo wörld ✓"
    whole = build_options(encoding="utf-8", hashlen=None)
    tiny_chunks = build_options(encoding="utf-8", hashlen=None, chunk_size=1)
    data = text.encode("utf-8")
    assert hash_stream(io.BytesIO(data), tiny_chunks) == hash_stream(io.BytesIO(data), whole)
    assert hash_stream(io.BytesIO(data), whole) == _md5(data)


def test_undecodable_bytes_become_replacement_characters() -> None:
    options = build_options(encoding="utf-8", hashlen=None)
    assert hash_stream(io.BytesIO(b"a\xffb"), options) == _md5("a\ufffdb".encode())


def test_binary_encoding_maps_bytes_to_latin1_code_points() -> None:
    options = build_options(encoding="binary", hashlen=None)
    assert options.encoding == "iso8859-1"
    assert hash_stream(io.BytesIO(b"\xe9"), options) == _md5("é".encode())


def _touch(path: Path, content: bytes) -> Path:
    _ = path.write_bytes(content)
    os.utime(path, ns=(MTIME_NS, MTIME_NS))
    return path


def test_stat_variables_expose_sizes_and_millisecond_times(tmp_path: Path) -> None:
    path = _touch(tmp_path / "a.txt", b"12345")
    variables = stat_variables(path.stat())
    assert variables["size"] == 5
    assert variables["mtime_ms"] == 1_700_000_000_123
    for name in ("mode", "ino", "dev", "nlink", "uid", "gid", "atime", "ctime"):
        assert name in variables


def test_default_etag_is_size_and_epoch_milliseconds(tmp_path: Path) -> None:
    path = _touch(tmp_path / "a.txt", b"12345")
    options = build_options(etag=True)
    assert options.mode is HashMode.ETAG
    assert etag_from_stat(path.stat(), options, TemplateRenderer()) == "5-1700000000123"


def test_custom_etag_template(tmp_path: Path) -> None:
    path = _touch(tmp_path / "a.txt", b"abc")
    options = build_options(etag="{{= size}}:{{= mtime_ms}}:{{= unknown}}")
    assert etag_from_stat(path.stat(), options, TemplateRenderer()) == "3:1700000000123:"


def test_etag_is_content_independent(tmp_path: Path) -> None:
    first = _touch(tmp_path / "first.txt", b"aaaa")
    second = _touch(tmp_path / "second.txt", b"bbbb")
    options = build_options(etag=True)
    renderer = TemplateRenderer()
    assert etag_from_stat(first.stat(), options, renderer) == etag_from_stat(second.stat(), options, renderer)


@pytest.mark.asyncio
async def test_fingerprinter_hashes_file_on_worker_thread(tmp_path: Path) -> None:
    _ = (tmp_path / "app.js").write_bytes(b"let a = 1;")
    fingerprinter = Fingerprinter(build_options(), env=LocalFileSystem(tmp_path))
    assert await fingerprinter.fingerprint("app.js") == _md5(b"let a = 1;")[:10]


@pytest.mark.asyncio
async def test_fingerprinter_etag_mode_uses_stat(tmp_path: Path) -> None:
    _ = _touch(tmp_path / "app.js", b"let a = 1;")
    fingerprinter = Fingerprinter(build_options(etag=True), env=LocalFileSystem(tmp_path))
    assert await fingerprinter.fingerprint("app.js") == "10-1700000000123"


@pytest.mark.asyncio
@pytest.mark.parametrize("etag", [False, True])
async def test_missing_file_raises_fingerprint_error(tmp_path: Path, etag: bool) -> None:
    fingerprinter = Fingerprinter(build_options(etag=etag), env=LocalFileSystem(tmp_path))
    with pytest.raises(FingerprintError) as excinfo:
        _ = await fingerprinter.fingerprint("missing.css")
    assert excinfo.value.path == "missing.css"
    assert isinstance(excinfo.value.error, FileNotFoundError)


def test_compute_logs_fingerprint_at_debug(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _ = (tmp_path / "a.css").write_bytes(b"a")
    fingerprinter = Fingerprinter(build_options(), env=LocalFileSystem(tmp_path))
    with caplog.at_level(logging.DEBUG, logger="filehash.fingerprint"):
        value = fingerprinter.compute("a.css")
    record = next(rec for rec in caplog.records if rec.name == "filehash.fingerprint")
    assert record.getMessage() == f"Hash for a.css: {value}"
    assert getattr(record, "fingerprint", None) == value
