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

"""Public API façade for filehash: synchronous entry points over the async pipeline."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from filehash.config import HashOptions, load_config
from filehash.environment import LocalFileSystem
from filehash.fingerprint import Fingerprinter
from filehash.orchestrator import process_group, process_groups

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from filehash.config import Config
    from filehash.core.type_aliases import Fingerprint
    from filehash.core.types import FileGroup, GroupResult
    from filehash.environment import Environment
    from filehash.template import TemplateRenderer

__all__ = ["fingerprint_files", "hash_group", "run", "run_config_file"]


def run(
    config: Config,
    *,
    env: Environment | None = None,
    renderer: TemplateRenderer | None = None,
) -> list[GroupResult]:
    """Process every group of `config` and return their results in order.

    Relative group paths resolve against ``config.root`` unless an explicit
    environment is supplied.
    """
    environment = env or LocalFileSystem(config.root)
    return asyncio.run(process_groups(config.groups, config.options, env=environment, renderer=renderer))


def run_config_file(path: Path | None = None) -> list[GroupResult]:
    """Load configuration (explicit file or discovery) and run it."""
    return run(load_config(path))


def hash_group(
    group: FileGroup,
    options: HashOptions | None = None,
    *,
    env: Environment | None = None,
    renderer: TemplateRenderer | None = None,
) -> GroupResult:
    """Synchronously process a single group."""
    return asyncio.run(process_group(group, options, env=env, renderer=renderer))


async def _fingerprint_all(fingerprinter: Fingerprinter, paths: Sequence[str]) -> list[Fingerprint]:
    return list(await asyncio.gather(*(fingerprinter.fingerprint(path) for path in paths)))


def fingerprint_files(
    paths: Sequence[str],
    options: HashOptions | None = None,
    *,
    env: Environment | None = None,
) -> dict[str, Fingerprint]:
    """Fingerprint ad-hoc files without renaming or writing a mapping.

    Returns:
        Fingerprints keyed by path, in the order the paths were given.

    Raises:
        FingerprintError: If any file cannot be stat'ed or read.
    """
    fingerprinter = Fingerprinter(options or HashOptions(), env=env)
    fingerprints = asyncio.run(_fingerprint_all(fingerprinter, paths))
    return dict(zip(paths, fingerprints, strict=True))
