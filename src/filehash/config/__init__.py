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

"""Configuration management for filehash.

This package validates option tables and configuration files with pydantic
models and converts them into the dataclasses the pipeline runs on.
"""

from __future__ import annotations

from .loader import LoadedConfig, config_from_mapping, expand_sources, load_config, load_config_with_metadata
from .models import (
    Config,
    ConfigFieldChoiceError,
    ConfigModel,
    ConfigReadError,
    ConfigValidationError,
    GroupModel,
    HashOptions,
    InvalidConfigFileError,
    InvalidOptionsError,
    OptionsModel,
    UnsupportedConfigVersionError,
    build_options,
    options_from_model,
)
from .validation import resolve_concurrency

__all__ = [
    "Config",
    "ConfigFieldChoiceError",
    "ConfigModel",
    "ConfigReadError",
    "ConfigValidationError",
    "GroupModel",
    "HashOptions",
    "InvalidConfigFileError",
    "InvalidOptionsError",
    "LoadedConfig",
    "OptionsModel",
    "UnsupportedConfigVersionError",
    "build_options",
    "config_from_mapping",
    "expand_sources",
    "load_config",
    "load_config_with_metadata",
    "options_from_model",
    "resolve_concurrency",
]
