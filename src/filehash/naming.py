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

"""Derive fingerprinted file names, mapping keys and mapping values."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, Final

from filehash.core.types import DerivedPaths
from filehash.template import TemplateRenderer

if TYPE_CHECKING:
    from filehash.config.models import HashOptions
    from filehash.core.types import FileRecord
    from filehash.core.type_aliases import Variables

__all__ = [
    "build_variables",
    "derive_mapping_path",
    "derive_name",
    "derive_paths",
    "normalize_name",
    "split_name",
]

_CURRENT_DIR: Final[str] = "."
_URL_MARKER: Final[str] = "://"


def split_name(source: str) -> tuple[str, str, str]:
    """Split `source` into ``(dirname, basename, extname)``.

    ``extname`` is the final suffix including its dot; dot-files such as
    ``.htaccess`` have none. ``dirname`` is ``"."`` for top-level files.
    """
    dirname, name = posixpath.split(source)
    index = name.rfind(".")
    if index <= 0:
        return dirname or _CURRENT_DIR, name, ""
    return dirname or _CURRENT_DIR, name[:index], name[index:]


def normalize_name(name: str) -> str:
    """Collapse redundant separators and ``.`` segments unless `name` is a URL."""
    if not name or _URL_MARKER in name:
        return name
    return posixpath.normpath(name)


def build_variables(source: str, fingerprint: str, *, cwd: str | None, dest: str | None) -> Variables:
    """Return the variable set exposed to rename and mapping templates."""
    dirname, basename, extname = split_name(source)
    return {
        "dest": dest or _CURRENT_DIR,
        "cwd": cwd or _CURRENT_DIR,
        "hash": fingerprint,
        "extname": extname,
        "dirname": dirname,
        "basename": basename,
    }


def derive_name(
    template: str | None,
    source: str,
    fingerprint: str,
    *,
    cwd: str | None,
    dest: str | None,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render `template` for one file.

    Args:
        template: Template text, or ``None`` when the derivation is disabled.
        source: Source path relative to ``cwd``.
        fingerprint: Fingerprint computed for the file.
        cwd: Group base directory.
        dest: Group destination directory.
        renderer: Renderer to use; a default-delimiter renderer when omitted.

    Returns:
        The normalised rendering, or `source` unchanged when `template` is
        disabled.
    """
    if not isinstance(template, str):
        return source
    renderer = renderer or TemplateRenderer()
    return normalize_name(renderer.render(template, build_variables(source, fingerprint, cwd=cwd, dest=dest)))


def derive_paths(
    record: FileRecord,
    options: HashOptions,
    *,
    cwd: str | None,
    dest: str | None,
    renderer: TemplateRenderer | None = None,
) -> DerivedPaths:
    """Compute the copy target and mapping entry for a fingerprinted file.

    The target is the renamed path joined under `dest` (``None`` without a
    destination). Key and value are ``None`` when the mapping is disabled.
    """
    renderer = renderer or TemplateRenderer()
    source, fingerprint = record.source, record.fingerprint
    target: str | None = None
    if dest:
        renamed = derive_name(options.rename, source, fingerprint, cwd=cwd, dest=dest, renderer=renderer)
        target = posixpath.normpath(f"{dest}/{renamed}")
    if options.mapping is None:
        return DerivedPaths(target=target, key=None, value=None)
    key = derive_name(options.mapping_key, source, fingerprint, cwd=cwd, dest=dest, renderer=renderer)
    value = derive_name(options.mapping_value, source, fingerprint, cwd=cwd, dest=dest, renderer=renderer)
    return DerivedPaths(target=target, key=key, value=value)


def derive_mapping_path(
    template: str | None,
    *,
    cwd: str | None,
    dest: str | None,
    renderer: TemplateRenderer | None = None,
) -> str | None:
    """Render the mapping file location, ``None`` when no mapping is written."""
    if template is None:
        return None
    renderer = renderer or TemplateRenderer()
    rendered = renderer.render(template, {"cwd": cwd or _CURRENT_DIR, "dest": dest or _CURRENT_DIR})
    return normalize_name(rendered)
