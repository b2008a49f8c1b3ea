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

"""``filehash run``: process the file groups of a configuration file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from filehash.api import run
from filehash.cli.helpers import echo, register_argument
from filehash.config import load_config_with_metadata
from filehash.core.model_types import LogComponent
from filehash.exceptions import FilehashError
from filehash.logging_utils import structured_extra

if TYPE_CHECKING:
    from collections.abc import Sequence

    from filehash.cli.types import SubparserCollection
    from filehash.core.types import GroupResult

__all__ = ["execute_run", "format_group_summary", "register_run_command"]

logger: logging.Logger = logging.getLogger("filehash.cli")


def register_run_command(
    subparsers: SubparserCollection,
    *,
    parents: Sequence[argparse.ArgumentParser] | None = None,
) -> None:
    """Attach the ``filehash run`` command to the CLI.

    Args:
        subparsers: Top-level argparse subparser collection to register commands on.
        parents: Shared parent parsers carrying global flags.
    """
    run_parser = subparsers.add_parser(
        "run",
        help="Fingerprint every configured file group",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=parents or [],
    )
    register_argument(
        run_parser,
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: discover filehash.toml, .filehash.toml or pyproject.toml).",
    )


def format_group_summary(result: GroupResult) -> str:
    """One-line description of a processed group."""
    label = result.group.cwd or "."
    line = f"[filehash] {label}: {result.processed} hashed, {result.skipped} skipped"
    if result.mapping_path is not None:
        line += f" -> {result.mapping_path}"
    return line


def execute_run(args: argparse.Namespace) -> int:
    """Execute the run subcommand.

    Args:
        args: Parsed CLI namespace.

    Returns:
        ``0`` on success, ``1`` when configuration or processing fails.
    """
    try:
        loaded = load_config_with_metadata(args.config)
        if loaded.path is None:
            logger.info("No configuration file found; nothing to do")
        results = run(loaded.config)
    except FilehashError as exc:
        logger.debug("run failed", exc_info=True, extra=structured_extra(LogComponent.CLI, details={"command": "run"}))
        echo(f"[filehash] {exc}", err=True)
        return 1
    if not results:
        echo("[filehash] No file groups configured")
        return 0
    for result in results:
        echo(format_group_summary(result))
    return 0
