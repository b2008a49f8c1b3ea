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

"""``filehash hash``: print fingerprints for ad-hoc files."""

from __future__ import annotations

import argparse
import json
from typing import TYPE_CHECKING

from filehash.api import fingerprint_files
from filehash.cli.helpers import echo, parse_positive_int, register_argument
from filehash.config import build_options
from filehash.exceptions import FilehashError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from filehash.cli.types import SubparserCollection

__all__ = ["execute_hash", "register_hash_command"]


def register_hash_command(
    subparsers: SubparserCollection,
    *,
    parents: Sequence[argparse.ArgumentParser] | None = None,
) -> None:
    """Attach the ``filehash hash`` command to the CLI.

    Args:
        subparsers: Top-level argparse subparser collection to register commands on.
        parents: Shared parent parsers carrying global flags.
    """
    hash_parser = subparsers.add_parser(
        "hash",
        help="Print fingerprints for the given files",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=parents or [],
    )
    register_argument(hash_parser, "files", nargs="+", metavar="FILE", help="Files to fingerprint.")
    register_argument(hash_parser, "--algorithm", default=None, help="hashlib algorithm (default: md5).")
    register_argument(
        hash_parser,
        "--hashlen",
        type=parse_positive_int,
        default=None,
        help="Truncate digests to this many hex characters (default: 10).",
    )
    register_argument(hash_parser, "--encoding", default=None, help="Decode file contents with this codec first.")
    register_argument(hash_parser, "--salt", default=None, help="String appended to the content before hashing.")
    register_argument(
        hash_parser,
        "--etag",
        nargs="?",
        const=True,
        default=None,
        metavar="TEMPLATE",
        help="Fingerprint from file metadata instead of content, optionally with a custom template.",
    )
    register_argument(
        hash_parser,
        "--json",
        action="store_true",
        help="Emit a JSON object mapping each file to its fingerprint.",
    )


def _option_overrides(args: argparse.Namespace) -> dict[str, object]:
    names = ("algorithm", "hashlen", "encoding", "salt", "etag")
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def execute_hash(args: argparse.Namespace) -> int:
    """Execute the hash subcommand.

    Args:
        args: Parsed CLI namespace.

    Returns:
        ``0`` when every file was fingerprinted, ``1`` otherwise.
    """
    try:
        options = build_options(_option_overrides(args))
        fingerprints = fingerprint_files(list(args.files), options)
    except FilehashError as exc:
        echo(f"[filehash] {exc}", err=True)
        return 1
    if args.json:
        echo(json.dumps(fingerprints, indent=2, ensure_ascii=False))
        return 0
    for path, fingerprint in fingerprints.items():
        echo(f"{fingerprint}  {path}")
    return 0
