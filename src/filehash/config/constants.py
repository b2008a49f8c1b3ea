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

"""Shared configuration defaults for filehash."""

from __future__ import annotations

from typing import Final

CONFIG_VERSION: Final[int] = 0

DEFAULT_ALGORITHM: Final[str] = "md5"
DEFAULT_HASHLEN: Final[int] = 10
DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024

DEFAULT_ETAG: Final[str] = "{{= size}}-{{= +mtime}}"
DEFAULT_RENAME: Final[str] = "{{= dirname}}/{{= basename}}.{{= hash}}{{= extname}}"
DEFAULT_MAPPING: Final[str] = "{{= dest}}/hash.json"
DEFAULT_MAPPING_KEY: Final[str] = "{{= cwd}}/{{= basename}}{{= extname}}"
DEFAULT_MAPPING_VALUE: Final[str] = "{{= dest}}/{{= basename}}.{{= hash}}{{= extname}}"
MAPPING_PATH_VARIABLES: Final[tuple[str, ...]] = ("cwd", "dest")

WORKERS_ENV: Final[str] = "FILEHASH_WORKERS"
MAX_AUTO_WORKERS: Final[int] = 32

CONFIG_FILENAMES: Final[tuple[str, ...]] = ("filehash.toml", ".filehash.toml", "pyproject.toml")

__all__ = [
    "CONFIG_FILENAMES",
    "CONFIG_VERSION",
    "DEFAULT_ALGORITHM",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_ETAG",
    "DEFAULT_HASHLEN",
    "DEFAULT_MAPPING",
    "DEFAULT_MAPPING_KEY",
    "DEFAULT_MAPPING_VALUE",
    "DEFAULT_RENAME",
    "MAPPING_PATH_VARIABLES",
    "MAX_AUTO_WORKERS",
    "WORKERS_ENV",
]
