"""pytest fixtures for per-test scratch directories.

Enable with ``pytest_plugins = ["scratch_fixture.pytest_plugin"]`` in a
top-level ``conftest.py`` or ``-p scratch_fixture.pytest_plugin``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from .config import RuntimeConfig, load_runtime_config
from .fixture import ScratchDirectoryFixture
from .harness import managed_fixture
from .logging_config import configure_logging


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("scratch-fixture")
    group.addoption(
        "--scratch-log",
        action="store_true",
        default=False,
        help="Configure structlog from SCRATCH_FIXTURE_LOG_LEVEL/SCRATCH_FIXTURE_LOG_FORMAT.",
    )


@pytest.fixture(scope="session")
def scratch_runtime_config(request: pytest.FixtureRequest) -> RuntimeConfig:
    config = load_runtime_config()
    if request.config.getoption("scratch_log"):
        configure_logging(config)
    return config


@pytest.fixture
def scratch_fixture(scratch_runtime_config: RuntimeConfig) -> Iterator[ScratchDirectoryFixture]:
    yield from managed_fixture(scratch_runtime_config)


@pytest.fixture
def scratch_dir(scratch_fixture: ScratchDirectoryFixture) -> Path:
    return scratch_fixture.root
