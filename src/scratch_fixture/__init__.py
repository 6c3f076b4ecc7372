"""scratch_fixture package."""

from .config import RuntimeConfig, load_runtime_config
from .fixture import (
    DEFAULT_STORE_NAME,
    FixtureSetupError,
    FixtureStateError,
    FixtureTeardownError,
    ScratchDirectoryFixture,
    ScratchFixtureError,
    new_scratch_path,
    scratch_directory,
)
from .harness import managed_fixture, use_scratch_directory

__all__ = [
    "DEFAULT_STORE_NAME",
    "FixtureSetupError",
    "FixtureStateError",
    "FixtureTeardownError",
    "RuntimeConfig",
    "ScratchDirectoryFixture",
    "ScratchFixtureError",
    "load_runtime_config",
    "managed_fixture",
    "new_scratch_path",
    "scratch_directory",
    "use_scratch_directory",
]
