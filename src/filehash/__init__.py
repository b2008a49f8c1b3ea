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

"""filehash - content fingerprints and cache-busting names for static files.

Computes content digests (or metadata etags) for groups of files, copies each
file to a name embedding its fingerprint, and writes a sorted JSON mapping
from original paths to fingerprinted ones.
"""

from __future__ import annotations

from filehash.exceptions import (
    FilehashError,
    FilehashTypeError,
    FilehashValidationError,
    FingerprintError,
    GroupProcessingError,
    MappingReadError,
    MaterializeError,
    TemplateSyntaxError,
)

from .api import fingerprint_files, hash_group, run, run_config_file
from .config import Config, HashOptions, build_options, load_config
from .core.types import DerivedPaths, FileGroup, FileRecord, GroupResult
from .environment import Environment, LocalFileSystem
from .fingerprint import Fingerprinter
from .mapping import MappingAggregator
from .orchestrator import process_group, process_groups
from .template import TemplateRenderer, render

__all__ = [
    "Config",
    "DerivedPaths",
    "Environment",
    "FileGroup",
    "FileRecord",
    "FilehashError",
    "FilehashTypeError",
    "FilehashValidationError",
    "FingerprintError",
    "Fingerprinter",
    "GroupProcessingError",
    "GroupResult",
    "HashOptions",
    "LocalFileSystem",
    "MappingAggregator",
    "MappingReadError",
    "MaterializeError",
    "TemplateRenderer",
    "TemplateSyntaxError",
    "__version__",
    "build_options",
    "fingerprint_files",
    "hash_group",
    "load_config",
    "process_group",
    "process_groups",
    "render",
    "run",
    "run_config_file",
]

__version__ = "0.1.0"
