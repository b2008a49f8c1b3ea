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

"""Unit tests for JSON helpers."""

from __future__ import annotations

import pytest

from filehash.core.model_types import LogComponent
from filehash.json import as_json_object, dump_mapping, normalize_enums_for_json

pytestmark = pytest.mark.unit


def test_as_json_object_keeps_values_untouched() -> None:
    data = {"a.css": "a.1.css", "n": 3, "meta": {"v": [1, 2]}, "none": None}
    assert as_json_object(data) is data


@pytest.mark.parametrize("data", [[], "text", 1, None])
def test_as_json_object_rejects_non_objects(data: object) -> None:
    assert as_json_object(data) is None


def test_dump_mapping_keeps_order_and_ends_with_newline() -> None:
    text = dump_mapping({"b": "2", "a": "1", "é": "ü"})
    assert text == '{\n  "b": "2",\n  "a": "1",\n  "é": "ü"\n}\n'


def test_normalize_enums_for_json_replaces_enum_keys_and_values() -> None:
    payload = {LogComponent.MAPPING: [LogComponent.CLI, 1, None], "other": object}
    normalized = normalize_enums_for_json(payload)
    assert normalized == {"mapping": ["cli", 1, None], "other": str(object)}
