from __future__ import annotations

import unittest
from pathlib import Path
from typing import Iterator

from .config import RuntimeConfig
from .fixture import ScratchDirectoryFixture


def managed_fixture(config: RuntimeConfig | None = None) -> Iterator[ScratchDirectoryFixture]:
    """Prepare a fixture, hand it out, and clean up on every exit path.

    Shaped as a generator so pytest fixtures can `yield from` it.
    """
    fixture = ScratchDirectoryFixture(config=config)
    fixture.prepare()
    try:
        yield fixture
    finally:
        fixture.cleanup()


def use_scratch_directory(
    testcase: unittest.TestCase,
    fixture: ScratchDirectoryFixture | None = None,
) -> Path:
    """Give a unittest test case its own scratch directory.

    Cleanup is registered with `addCleanup`, which unittest runs even when
    `setUp` or the test body fails.
    """
    fixture = fixture if fixture is not None else ScratchDirectoryFixture()
    root = fixture.prepare()
    testcase.addCleanup(fixture.cleanup)
    return root
