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

"""Unit tests for deriving fingerprinted names."""

from __future__ import annotations

import pytest

from filehash.config import build_options
from filehash.core.type_aliases import Fingerprint, SourcePath
from filehash.core.types import DerivedPaths, FileRecord
from filehash.naming import (
    build_variables,
    derive_mapping_path,
    derive_name,
    derive_paths,
    normalize_name,
    split_name,
)
from filehash.template import TemplateRenderer

pytestmark = pytest.mark.unit

DEFAULT_RENAME = "{{= dirname}}/{{= basename}}.{{= hash}}{{= extname}}"


def _record(source: str, fingerprint: str = "abc123def0", cwd: str | None = None) -> FileRecord:
    resolved = f"{cwd}/{source}" if cwd else source
    return FileRecord(source=SourcePath(source), resolved=resolved, fingerprint=Fingerprint(fingerprint))


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("css/style.css", ("css", "style", ".css")),
        ("style.css", (".", "style", ".css")),
        ("vendor/archive.tar.gz", ("vendor", "archive.tar", ".gz")),
        (".htaccess", (".", ".htaccess", "")),
        ("bin/Makefile", ("bin", "Makefile", "")),
        ("a/b/trailing.", ("a/b", "trailing", ".")),
    ],
)
def test_split_name(source: str, expected: tuple[str, str, str]) -> None:
    assert split_name(source) == expected


def test_build_variables_defaults_cwd_and_dest_to_current_dir() -> None:
    variables = build_variables("img/logo.png", "f00", cwd=None, dest=None)
    assert variables == {
        "dest": ".",
        "cwd": ".",
        "hash": "f00",
        "extname": ".png",
        "dirname": "img",
        "basename": "logo",
    }


def test_default_rename_embeds_fingerprint_before_extension() -> None:
    derived = derive_name(DEFAULT_RENAME, "style.css", "abc123def0", cwd=None, dest=None)
    assert derived == "style.abc123def0.css"
    assert derived.endswith("style.abc123def0.css")


def test_disabled_template_returns_source_unchanged() -> None:
    assert derive_name(None, "css/./style.css", "abc", cwd="static", dest="dist") == "css/./style.css"


def test_rendered_names_are_normalized() -> None:
    assert normalize_name("./a//b/../c.css") == "a/c.css"
    assert normalize_name("") == ""


def test_urls_are_not_normalized() -> None:
    template = "https://cdn.example.com//assets/{{= basename}}.{{= hash}}{{= extname}}"
    derived = derive_name(template, "app.js", "f00", cwd=None, dest=None)
    assert derived == "https://cdn.example.com//assets/app.f00.js"


def test_derive_name_uses_given_renderer() -> None:
    renderer = TemplateRenderer("<%", "%>")
    assert derive_name("<%= basename %>-<%= hash %>", "a.txt", "1", cwd=None, dest=None, renderer=renderer) == "a-1"


def test_derive_paths_with_cwd_and_dest() -> None:
    derived = derive_paths(_record("css/style.css", cwd="static"), build_options(), cwd="static", dest="dist")
    assert derived == DerivedPaths(
        target="dist/css/style.abc123def0.css",
        key="static/style.css",
        value="dist/style.abc123def0.css",
    )


def test_derive_paths_without_dest_has_no_target() -> None:
    derived = derive_paths(_record("css/style.css"), build_options(), cwd=None, dest=None)
    assert derived.target is None
    assert derived.key == "style.css"
    assert derived.value == "style.abc123def0.css"


def test_derive_paths_without_mapping_has_no_entry() -> None:
    derived = derive_paths(_record("a.js"), build_options(mapping=False), cwd=None, dest="dist")
    assert derived == DerivedPaths(target="dist/a.abc123def0.js", key=None, value=None)


def test_disabled_key_and_value_use_source_path() -> None:
    options = build_options(mappingKey=False, mappingValue=False)
    derived = derive_paths(_record("js/a.js"), options, cwd="src", dest="dist")
    assert derived.key == "js/a.js"
    assert derived.value == "js/a.js"


def test_disabled_rename_copies_under_original_name() -> None:
    derived = derive_paths(_record("js/a.js"), build_options(rename=False), cwd="src", dest="dist")
    assert derived.target == "dist/js/a.js"


def test_absolute_rename_stays_under_dest() -> None:
    options = build_options(rename="/abs/{{= basename}}{{= extname}}")
    derived = derive_paths(_record("a.js"), options, cwd=None, dest="dist")
    assert derived.target == "dist/abs/a.js"


def test_escaping_rename_leaves_dest() -> None:
    options = build_options(rename="../{{= basename}}{{= extname}}")
    derived = derive_paths(_record("a.js"), options, cwd=None, dest="dist")
    assert derived.target == "a.js"


@pytest.mark.parametrize(
    ("template", "cwd", "dest", "expected"),
    [
        ("{{= dest}}/hash.json", None, "dist", "dist/hash.json"),
        ("{{= dest}}/hash.json", None, None, "hash.json"),
        ("{{= cwd}}/maps/{{= dest}}.json", "static", "out", "static/maps/out.json"),
        (None, "static", "dist", None),
    ],
)
def test_derive_mapping_path(template: str | None, cwd: str | None, dest: str | None, expected: str | None) -> None:
    assert derive_mapping_path(template, cwd=cwd, dest=dest) == expected
