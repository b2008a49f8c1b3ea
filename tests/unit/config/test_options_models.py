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

"""Unit tests for option models and their runtime conversion."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from filehash.config import ConfigModel, HashOptions, InvalidOptionsError, OptionsModel, build_options
from filehash.config.constants import DEFAULT_ETAG, DEFAULT_MAPPING, DEFAULT_MAPPING_KEY, DEFAULT_RENAME
from filehash.config.models import group_from_model, merge_option_models, options_from_model
from filehash.core.model_types import FailurePolicy, HashMode
from filehash.core.type_aliases import SourcePath
from filehash.exceptions import FilehashValidationError

pytestmark = pytest.mark.unit


def test_build_options_defaults_match_runtime_defaults() -> None:
    options = build_options()
    assert options == HashOptions()
    assert options.algorithm == "md5"
    assert options.hashlen == 10
    assert options.rename == DEFAULT_RENAME
    assert options.mapping == DEFAULT_MAPPING
    assert options.mode is HashMode.CONTENT
    assert options.on_error is FailurePolicy.SKIP


def test_camel_case_aliases_and_output_are_accepted() -> None:
    options = build_options(
        {
            "output": "build/assets.json",
            "mappingKey": "{{= basename}}",
            "mappingValue": False,
            "onError": "FAIL",
            "chunkSize": 1024,
        },
    )
    assert options.mapping == "build/assets.json"
    assert options.mapping_key == "{{= basename}}"
    assert options.mapping_value is None
    assert options.on_error is FailurePolicy.FAIL
    assert options.chunk_size == 1024


def test_overrides_apply_on_top_of_raw_mapping() -> None:
    options = build_options({"hashlen": 6, "salt": "a"}, hashlen=8)
    assert options.hashlen == 8
    assert options.salt == "a"


@pytest.mark.parametrize(
    ("field", "value", "expected"),
    [
        ("rename", True, DEFAULT_RENAME),
        ("rename", False, None),
        ("rename", "", None),
        ("mapping", None, None),
        ("mapping_key", True, DEFAULT_MAPPING_KEY),
        ("etag", True, DEFAULT_ETAG),
        ("etag", False, None),
        ("etag", "", None),
        ("etag", "{{= ino}}", "{{= ino}}"),
    ],
)
def test_template_options_accept_booleans(field: str, value: object, expected: str | None) -> None:
    assert getattr(build_options({field: value}), field) == expected


def test_etag_selects_metadata_mode() -> None:
    assert build_options(etag=True).mode is HashMode.ETAG


def test_algorithm_names_are_normalised() -> None:
    assert build_options(algorithm=" SHA256 ").algorithm == "sha256"


@pytest.mark.parametrize(
    "raw",
    [
        {"algorithm": "not-a-hash"},
        {"algorithm": "shake_128"},
        {"algorithm": 5},
        {"hashlen": 0},
        {"hashlen": -3},
        {"hashlen": True},
        {"chunk_size": 0},
        {"encoding": "no-such-codec"},
        {"encoding": "base64"},
        {"rename": "{{= not valid}}"},
        {"etag": "{{= +}}"},
        {"mapping": "{{= dest}}/{{= hash}}.json"},
        {"rename": 12},
        {"on_error": "ignore"},
        {"concurrency": 0},
        {"unknown_option": 1},
    ],
)
def test_invalid_options_are_rejected(raw: dict[str, object]) -> None:
    with pytest.raises(InvalidOptionsError) as excinfo:
        _ = build_options(raw)
    assert isinstance(excinfo.value, FilehashValidationError)
    assert isinstance(excinfo.value.error, ValidationError)


def test_hashlen_none_keeps_full_digest() -> None:
    assert build_options(hashlen=None).hashlen is None


@pytest.mark.parametrize(("value", "expected"), [(None, None), ("auto", "auto"), (" AUTO ", "auto"), (4, 4), ("3", 3)])
def test_concurrency_values(value: object, expected: object) -> None:
    assert build_options(concurrency=value).concurrency == expected


def test_empty_salt_and_encoding_are_unset() -> None:
    options = build_options(salt="", encoding="")
    assert options.salt is None
    assert options.encoding is None


def test_merge_option_models_only_applies_explicit_fields() -> None:
    base = OptionsModel.model_validate({"hashlen": 12, "salt": "s", "keep": False})
    override = OptionsModel.model_validate({"hashlen": 4})
    merged = options_from_model(merge_option_models(base, override))
    assert merged.hashlen == 4
    assert merged.salt == "s"
    assert merged.keep is False
    assert merge_option_models(base, None) is base


def test_group_from_model_without_overrides_has_no_options() -> None:
    model = ConfigModel.model_validate({"groups": [{"cwd": "static", "dest": "dist", "src": "*.css"}]})
    group = group_from_model(model.groups[0], model.options, [SourcePath("a.css")])
    assert group.options is None
    assert group.cwd == "static"
    assert group.sources == ["a.css"]


def test_group_from_model_merges_overrides() -> None:
    model = ConfigModel.model_validate(
        {
            "options": {"hashlen": 12, "salt": "s"},
            "groups": [{"sources": ["a.css"], "options": {"hashlen": 6}, "cwd": "  "}],
        },
    )
    group = group_from_model(model.groups[0], model.options, [SourcePath("a.css")])
    assert group.cwd is None
    assert group.options is not None
    assert group.options.hashlen == 6
    assert group.options.salt == "s"
