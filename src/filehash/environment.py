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

"""Environment capabilities consumed by the hashing pipeline.

The pipeline never touches the filesystem directly. It asks an `Environment`
to stat, read, copy, delete and write files, which keeps every stage testable
against a scripted environment and lets hosts redirect I/O.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol

from filehash.locks import mapping_lock

if TYPE_CHECKING:
    import os
    from contextlib import AbstractContextManager

__all__ = ["Environment", "LocalFileSystem"]

logger: logging.Logger = logging.getLogger("filehash.environment")


class Environment(Protocol):
    """Filesystem capabilities required by fingerprinting, materialisation and persistence."""

    def exists(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def open_binary(self, path: str) -> BinaryIO: ...

    def stat(self, path: str) -> os.stat_result: ...

    def copy(self, source: str, target: str) -> None: ...

    def delete(self, path: str) -> None: ...

    def read_json(self, path: str) -> object: ...

    def write_text(self, path: str, content: str) -> None: ...

    def lock(self, path: str) -> AbstractContextManager[object]: ...


class LocalFileSystem:
    """`Environment` backed by the local filesystem.

    Relative paths resolve against `root` (the process working directory when
    omitted), never against whatever the working directory happens to be when
    a worker thread runs.
    """

    __slots__ = ("root",)

    def __init__(self, root: Path | None = None) -> None:
        self.root: Path = (root or Path.cwd()).resolve()

    def __repr__(self) -> str:
        return f"LocalFileSystem(root={self.root!r})"

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def is_file(self, path: str) -> bool:
        return self.resolve(path).is_file()

    def is_dir(self, path: str) -> bool:
        return self.resolve(path).is_dir()

    def open_binary(self, path: str) -> BinaryIO:
        return self.resolve(path).open("rb")

    def stat(self, path: str) -> os.stat_result:
        return self.resolve(path).stat()

    def copy(self, source: str, target: str) -> None:
        """Copy file contents to `target`, creating parent directories."""
        destination = self.resolve(target)
        destination.parent.mkdir(parents=True, exist_ok=True)
        _ = shutil.copyfile(self.resolve(source), destination)

    def delete(self, path: str) -> None:
        self.resolve(path).unlink()

    def read_json(self, path: str) -> object:
        """Decode the JSON document at `path`.

        Raises:
            OSError: If the file cannot be read.
            json.JSONDecodeError: If the file is not valid JSON.
        """
        return json.loads(self.resolve(path).read_text(encoding="utf-8"))

    def write_text(self, path: str, content: str) -> None:
        """Write UTF-8 text through a sibling temporary file and atomic rename."""
        destination = self.resolve(path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = destination.with_name(destination.name + ".tmp")
        _ = tmp_path.write_text(content, encoding="utf-8")
        _ = tmp_path.replace(destination)
        logger.debug("Wrote %s", destination)

    def lock(self, path: str) -> AbstractContextManager[object]:
        return mapping_lock(self.resolve(path))
