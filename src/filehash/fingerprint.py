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

"""Fingerprint computation: content digests and metadata etags."""

from __future__ import annotations

import asyncio
import codecs
import hashlib
import logging
import time
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, BinaryIO, Final

from filehash.compat import UTC
from filehash.config.constants import DEFAULT_ETAG
from filehash.core.model_types import HashMode, LogComponent
from filehash.core.type_aliases import Fingerprint
from filehash.environment import LocalFileSystem
from filehash.exceptions import FingerprintError
from filehash.logging_utils import structured_extra
from filehash.template import TemplateRenderer

if TYPE_CHECKING:
    import os

    from filehash.config.models import HashOptions
    from filehash.core.type_aliases import Variables
    from filehash.environment import Environment

__all__ = ["Fingerprinter", "etag_from_stat", "hash_stream", "stat_variables"]

logger: logging.Logger = logging.getLogger("filehash.fingerprint")

_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)
_NS_PER_MS: Final[int] = 1_000_000


def _timestamp(ns: int) -> datetime:
    return _EPOCH + timedelta(microseconds=ns // 1000)


def stat_variables(stat: os.stat_result) -> Variables:
    """Expose a stat result as template variables.

    Times are timezone-aware UTC datetimes (``+mtime`` renders epoch
    milliseconds); ``*_ms`` variants carry the same instants as integers.
    Fields the platform does not report are omitted and render empty.
    """
    variables: Variables = {
        "size": stat.st_size,
        "mode": stat.st_mode,
        "ino": stat.st_ino,
        "dev": stat.st_dev,
        "nlink": stat.st_nlink,
        "uid": stat.st_uid,
        "gid": stat.st_gid,
    }
    for name in ("mtime", "atime", "ctime"):
        ns: int = getattr(stat, f"st_{name}_ns")
        variables[name] = _timestamp(ns)
        variables[f"{name}_ms"] = ns // _NS_PER_MS
    for name in ("blksize", "blocks"):
        value = getattr(stat, f"st_{name}", None)
        if value is not None:
            variables[name] = value
    birthtime = getattr(stat, "st_birthtime", None)
    if birthtime is not None:
        variables["birthtime"] = _timestamp(int(birthtime * 1_000_000_000))
    return variables


def etag_from_stat(stat: os.stat_result, options: HashOptions, renderer: TemplateRenderer) -> Fingerprint:
    """Render the etag template against file metadata."""
    template = options.etag or DEFAULT_ETAG
    return Fingerprint(renderer.render(template, stat_variables(stat)))


def hash_stream(stream: BinaryIO, options: HashOptions) -> Fingerprint:
    """Digest a binary stream according to `options`.

    With an ``encoding`` the bytes are decoded incrementally and the text is
    digested as UTF-8, so multi-byte sequences may straddle chunk boundaries.
    Undecodable bytes become U+FFFD. The salt, when set, is digested after the
    content.

    Args:
        stream: Readable binary stream positioned at the start of the content.
        options: Hashing options (algorithm, encoding, salt, hashlen, chunk size).

    Returns:
        The hex digest truncated to ``options.hashlen`` characters.
    """
    hasher = hashlib.new(options.algorithm)
    decoder = codecs.getincrementaldecoder(options.encoding)(errors="replace") if options.encoding else None
    while chunk := stream.read(options.chunk_size):
        if decoder is None:
            hasher.update(chunk)
        else:
            hasher.update(decoder.decode(chunk).encode("utf-8", "surrogatepass"))
    if decoder is not None:
        hasher.update(decoder.decode(b"", final=True).encode("utf-8", "surrogatepass"))
    if options.salt:
        hasher.update(options.salt.encode("utf-8"))
    digest = hasher.hexdigest()
    return Fingerprint(digest[: options.hashlen] if options.hashlen else digest)


class Fingerprinter:
    """Compute fingerprints for files in one environment with fixed options."""

    __slots__ = ("env", "options", "renderer")

    def __init__(
        self,
        options: HashOptions,
        *,
        renderer: TemplateRenderer | None = None,
        env: Environment | None = None,
    ) -> None:
        self.options = options
        self.renderer = renderer or TemplateRenderer()
        self.env: Environment = env or LocalFileSystem()

    async def fingerprint(self, path: str) -> Fingerprint:
        """Compute the fingerprint of `path` on a worker thread.

        Raises:
            FingerprintError: If the file cannot be stat'ed or read.
        """
        return await asyncio.to_thread(self.compute, path)

    def compute(self, path: str) -> Fingerprint:
        """Synchronous counterpart of `fingerprint`."""
        start = time.perf_counter()
        try:
            if self.options.mode is HashMode.ETAG:
                value = etag_from_stat(self.env.stat(path), self.options, self.renderer)
                label = "Etag"
            else:
                with self.env.open_binary(path) as stream:
                    value = hash_stream(stream, self.options)
                label = "Hash"
        except OSError as exc:
            raise FingerprintError(path, exc) from exc
        logger.debug(
            "%s for %s: %s",
            label,
            path,
            value,
            extra=structured_extra(
                LogComponent.FINGERPRINT,
                path=path,
                fingerprint=value,
                duration_ms=(time.perf_counter() - start) * 1000,
            ),
        )
        return value
