from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from scratch_fixture import RuntimeConfig, scratch_directory

pytest_plugins = ["pytester", "scratch_fixture.pytest_plugin"]

RUNTIME_ENV_VARS = (
    "SCRATCH_FIXTURE_LOG_LEVEL",
    "SCRATCH_FIXTURE_LOG_FORMAT",
    "SCRATCH_FIXTURE_BASE_DIR",
    "SCRATCH_FIXTURE_PREFIX",
    "SCRATCH_FIXTURE_DIR_MODE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in RUNTIME_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def scratch_base() -> Iterator[Path]:
    """Private parent directory for tests that point fixtures at a custom base."""
    with scratch_directory(config=RuntimeConfig()) as base:
        yield base
