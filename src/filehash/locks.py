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

"""Advisory locks guarding read-merge-write cycles on mapping files."""

from __future__ import annotations

import importlib
import logging
import os
import time
from contextlib import contextmanager
from typing import IO, TYPE_CHECKING, Final, Protocol, cast

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

__all__ = ["LOCK_SUFFIX", "lock_path_for", "mapping_lock"]

logger: logging.Logger = logging.getLogger("filehash.mapping")

LOCK_SUFFIX: Final[str] = ".lock"
_RETRY_INTERVAL: Final[float] = 0.05


class _FcntlModule(Protocol):
    LOCK_EX: int
    LOCK_UN: int

    def flock(self, fd: int, operation: int) -> None: ...


class _MsvcrtModule(Protocol):
    LK_NBLCK: int
    LK_UNLCK: int

    def locking(self, fd: int, mode: int, size: int) -> None: ...


def _import_optional(name: str) -> object | None:
    try:  # pragma: no cover - platform dependent
        return importlib.import_module(name)
    except ImportError:  # pragma: no cover
        return None


fcntl_module = cast("_FcntlModule | None", _import_optional("fcntl"))
msvcrt_module = cast("_MsvcrtModule | None", _import_optional("msvcrt"))


def lock_path_for(target: Path) -> Path:
    """Return the sidecar lock file used for `target`."""
    return target.with_name(target.name + LOCK_SUFFIX)


def _still_linked(handle: IO[bytes], lock_path: Path) -> bool:
    # A holder that just released may have unlinked the sidecar we opened.
    try:
        return os.fstat(handle.fileno()).st_ino == lock_path.stat().st_ino
    except FileNotFoundError:
        return False


def _acquire_posix(module: _FcntlModule, lock_path: Path) -> IO[bytes]:
    while True:
        handle = lock_path.open("a+b")
        module.flock(handle.fileno(), module.LOCK_EX)
        if _still_linked(handle, lock_path):
            return handle
        handle.close()


def _acquire_windows(module: _MsvcrtModule, lock_path: Path) -> IO[bytes]:  # pragma: no cover - windows only
    handle = lock_path.open("a+b")
    while True:
        try:
            module.locking(handle.fileno(), module.LK_NBLCK, 1)
        except OSError:
            time.sleep(_RETRY_INTERVAL)
        else:
            return handle


@contextmanager
def mapping_lock(target: Path) -> Iterator[Path]:
    """Hold an exclusive advisory lock for the mapping file at `target`.

    The lock lives in a sidecar file next to the mapping. On POSIX the sidecar
    is unlinked while the lock is still held and waiters re-open a fresh one.
    Platforms without ``fcntl`` or ``msvcrt`` get a no-op lock.

    Args:
        target: Mapping file about to be read, merged and rewritten.

    Yields:
        The lock file path once the lock is held.
    """
    lock_path = lock_path_for(target.resolve())
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    if fcntl_module:
        handle = _acquire_posix(fcntl_module, lock_path)
    elif msvcrt_module:  # pragma: no cover - windows only
        handle = _acquire_windows(msvcrt_module, lock_path)
    else:  # pragma: no cover
        handle = lock_path.open("a+b")
    logger.debug("Acquired mapping lock %s", lock_path)
    try:
        yield lock_path
    finally:
        try:
            if fcntl_module:
                lock_path.unlink(missing_ok=True)
                fcntl_module.flock(handle.fileno(), fcntl_module.LOCK_UN)
            elif msvcrt_module:  # pragma: no cover - windows only
                _ = handle.seek(0)
                msvcrt_module.locking(handle.fileno(), msvcrt_module.LK_UNLCK, 1)
        finally:
            handle.close()
