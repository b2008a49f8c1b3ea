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

"""Pytest entry point that wires shared fixtures and markers."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

pytest_plugins = ("tests.fixtures.environments",)

_LOGGER_NAMES = (
    "filehash",
    "filehash.cli",
    "filehash.config",
    "filehash.environment",
    "filehash.fingerprint",
    "filehash.mapping",
    "filehash.orchestrator",
)
_ENV_VARS = ("FILEHASH_LOG_FORMAT", "FILEHASH_LOG_LEVEL", "FILEHASH_WORKERS")


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with the custom markers used by the test suite."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line(
        "markers",
        "integration: Integration tests (slower, multiple components)",
    )
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "cli: CLI-related tests")


@pytest.fixture(autouse=True)
def reset_filehash_logging() -> Generator[None, None, None]:
    """Undo ``configure_logging`` side effects so caplog keeps seeing records."""
    saved = {name: os.environ.get(name) for name in _ENV_VARS}
    yield
    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    for name, value in saved.items():
        if value is None:
            _ = os.environ.pop(name, None)
        else:
            os.environ[name] = value
