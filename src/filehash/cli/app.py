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

"""CLI entry point and dispatch for filehash commands."""

from __future__ import annotations

import argparse
import logging
import pathlib
from collections.abc import Callable, Sequence
from textwrap import dedent
from typing import TYPE_CHECKING, Final

from filehash import __version__
from filehash.cli.commands import execute_hash, execute_run, register_hash_command, register_run_command
from filehash.cli.helpers import echo as _echo
from filehash.cli.helpers import register_argument as _register_argument
from filehash.core.model_types import LogFormat
from filehash.logging_utils import LOG_FORMATS, LOG_LEVELS, configure_logging

if TYPE_CHECKING:
    from filehash.cli.types import SubparserCollection

logger: logging.Logger = logging.getLogger("filehash.cli")

FILEHASH_VERSION: Final[str] = __version__

CONFIG_TEMPLATE: Final[str] = dedent(
    """\
    # filehash configuration template
    # Save this file as filehash.toml in the root of your project.
    config_version = 0

    [options]
    # Digest settings for content fingerprints.
    algorithm = "md5"
    hashlen = 10
    # encoding = "utf-8"        # hash decoded text instead of raw bytes
    # salt = "v2"               # appended after the file contents

    # Fingerprint from metadata instead of content (true or a template).
    # etag = "{{= size}}-{{= +mtime}}"

    # Templates; set a template to false to disable that derivation.
    # rename = "{{= dirname}}/{{= basename}}.{{= hash}}{{= extname}}"
    # mapping = "{{= dest}}/hash.json"
    # mapping_key = "{{= cwd}}/{{= basename}}{{= extname}}"
    # mapping_value = "{{= dest}}/{{= basename}}.{{= hash}}{{= extname}}"

    keep = true
    merge = false
    # concurrency = "auto"
    # on_error = "skip"          # choices: skip, fail

    [[groups]]
    cwd = "static"
    dest = "dist"
    src = ["**/*.css", "**/*.js"]

    # Per-group overrides are merged over [options]:
    # [groups.options]
    # hashlen = 8
    """,
)


def write_config_template(path: pathlib.Path, *, force: bool) -> int:
    """Write the filehash configuration template to a file.

    Args:
        path: Target path where the configuration file will be written.
        force: Overwrite the file if it already exists.

    Returns:
        int: Exit code (0 for success, 1 for failure).
    """
    if path.exists() and not force:
        _echo(f"[filehash] Refusing to overwrite existing file: {path}")
        _echo("Use --force if you want to replace it.")
        return 1
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    _echo(f"[filehash] Wrote starter config to {path}")
    return 0


CommandHandler = Callable[[argparse.Namespace], int]


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the filehash command-line interface.

    Args:
        argv: Command-line arguments to parse. If None, uses sys.argv.

    Returns:
        int: Exit code from the executed command handler (0 for success, non-zero for failure).
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.version:
        _echo(f"filehash {FILEHASH_VERSION}")
        return 0
    if args.command is None:
        parser.error("No command provided.")
    _initialize_logging(args.log_format, args.log_level)
    handler = _command_handlers().get(args.command)
    if handler is None:
        parser.error(f"Unknown command {args.command}")
    logger.debug("Dispatching %s", args.command)
    return handler(args)


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with global flags and every subcommand."""
    common = argparse.ArgumentParser(add_help=False)
    _register_argument(
        common,
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Logging output format (default: FILEHASH_LOG_FORMAT or text).",
    )
    _register_argument(
        common,
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Verbosity of logged events (default: FILEHASH_LOG_LEVEL or info).",
    )
    parser = argparse.ArgumentParser(
        prog="filehash",
        parents=[common],
        description="Fingerprint static files, copy them to cache-busting names and write a JSON mapping.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _register_argument(
        parser,
        "--version",
        action="store_true",
        help="Print the filehash version and exit.",
    )
    subparsers = parser.add_subparsers(dest="command")

    parents = [common]
    register_run_command(subparsers, parents=parents)
    register_hash_command(subparsers, parents=parents)
    _register_init_command(subparsers, parents=parents)
    return parser


def _register_init_command(
    subparsers: SubparserCollection,
    *,
    parents: Sequence[argparse.ArgumentParser] | None,
) -> None:
    """Register the 'init' subcommand, which writes a starter filehash.toml.

    Args:
        subparsers: Subparser registry where the init command will be added.
        parents: Shared parent parsers carrying global flags.
    """
    init = subparsers.add_parser(
        "init",
        help="Generate a starter configuration file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=parents or [],
    )
    _register_argument(
        init,
        "--path",
        type=pathlib.Path,
        default=pathlib.Path("filehash.toml"),
        help="Destination for the generated configuration file.",
    )
    _register_argument(
        init,
        "--force",
        action="store_true",
        help="Overwrite the output file if it already exists.",
    )


def _execute_init(args: argparse.Namespace) -> int:
    return write_config_template(args.path, force=args.force)


def _initialize_logging(log_format: str | None, log_level: str | None) -> None:
    """Configure logging from CLI flags, falling back to the environment."""
    selected = LogFormat.from_str(log_format) if log_format else None
    _ = configure_logging(selected, log_level=log_level)


def _command_handlers() -> dict[str, CommandHandler]:
    """Return a mapping of command names to their handler functions."""
    return {
        "run": execute_run,
        "hash": execute_hash,
        "init": _execute_init,
    }
