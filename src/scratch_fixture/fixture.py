from __future__ import annotations

import os
import shutil
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType
from typing import Iterator

from .config import (
    DEFAULT_DIR_MODE,
    DEFAULT_PREFIX,
    RuntimeConfig,
    check_dir_mode,
    check_prefix,
    load_runtime_config,
)
from .logging_config import get_logger, log_event


DEFAULT_STORE_NAME = "testmodel.sqlite"

logger = get_logger("scratch_fixture.fixture")


class ScratchFixtureError(RuntimeError):
    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class FixtureSetupError(ScratchFixtureError):
    """The scratch directory could not be created; the test must not run."""


class FixtureTeardownError(ScratchFixtureError):
    """The scratch directory existed but could not be fully removed."""

    def __init__(self, message: str, path: Path, remaining_entries: int | None = None) -> None:
        super().__init__(message, path)
        self.remaining_entries = remaining_entries


class FixtureStateError(ScratchFixtureError):
    """`root` was read outside the prepare/cleanup window."""


def new_scratch_path(base_dir: Path | str | None = None, prefix: str = DEFAULT_PREFIX) -> Path:
    check_prefix(prefix)
    base = Path(base_dir) if base_dir is not None else Path(tempfile.gettempdir())
    # uuid4 draws from os.urandom, so concurrent callers share no state.
    return base.resolve() / f"{prefix}{uuid.uuid4().hex}"


class ScratchDirectoryFixture:
    """Owns one per-test scratch directory.

    `prepare()` creates a fresh directory under the temp root, `root` exposes it
    while the test runs and `cleanup()` removes it recursively. Used as a context
    manager the cleanup runs on every exit path.
    """

    def __init__(
        self,
        base_dir: Path | str | None = None,
        prefix: str | None = None,
        dir_mode: int | None = None,
        config: RuntimeConfig | None = None,
    ) -> None:
        if config is None and (base_dir is None or prefix is None or dir_mode is None):
            config = load_runtime_config()
        self.base_dir = base_dir if base_dir is not None else (config.base_dir if config else None)
        self.prefix = prefix if prefix is not None else (config.prefix if config else DEFAULT_PREFIX)
        self.dir_mode = (
            dir_mode if dir_mode is not None else (config.dir_mode if config else DEFAULT_DIR_MODE)
        )
        check_prefix(self.prefix)
        check_dir_mode(self.dir_mode)
        self._root: Path | None = None

    @property
    def active(self) -> bool:
        return self._root is not None

    @property
    def root_or_none(self) -> Path | None:
        return self._root

    @property
    def root(self) -> Path:
        if self._root is None:
            raise FixtureStateError(
                "Scratch directory is not active. Call prepare() before reading root."
            )
        return self._root

    def prepare(self) -> Path:
        if self._root is not None:
            raise FixtureSetupError(
                f"Scratch directory already active at {self._root}. Call cleanup() first.",
                self._root,
            )

        path: Path | None = None
        try:
            path = new_scratch_path(self.base_dir, self.prefix)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.mkdir(mode=self.dir_mode, exist_ok=False)
        # resolve() reports symlink loops as RuntimeError before Python 3.13.
        except (OSError, RuntimeError) as exc:
            failed_at = path if path is not None else self._base_path()
            log_event(
                logger, "error", "scratch_dir_prepare_failed", path=str(failed_at), error=str(exc)
            )
            raise FixtureSetupError(
                f"Could not create scratch directory at {failed_at}: {exc}", failed_at
            ) from exc

        self._root = path
        log_event(logger, "debug", "scratch_dir_prepared", path=str(path))
        return path

    def cleanup(self) -> None:
        path = self._root
        if path is None:
            return
        # Cleared up front so a failed removal is never retried against a stale path.
        self._root = None

        if not os.path.lexists(path):
            log_event(logger, "debug", "scratch_dir_already_absent", path=str(path))
            return

        try:
            if path.is_symlink() or not path.is_dir():
                path.unlink()
            else:
                shutil.rmtree(path)
        except FileNotFoundError as exc:
            if os.path.lexists(path):
                raise self._teardown_error(path, exc) from exc
            log_event(logger, "debug", "scratch_dir_already_absent", path=str(path))
            return
        except OSError as exc:
            raise self._teardown_error(path, exc) from exc

        log_event(logger, "debug", "scratch_dir_removed", path=str(path))

    def store_path(self, name: str = DEFAULT_STORE_NAME) -> Path:
        candidate = Path(name)
        if not candidate.parts or candidate.is_absolute() or ".." in candidate.parts:
            raise ValueError(f"Store name must be a relative path inside the scratch root: {name!r}")
        return self.root / candidate

    def __enter__(self) -> Path:
        return self.prepare()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def _base_path(self) -> Path | None:
        return Path(self.base_dir) if self.base_dir is not None else None

    @staticmethod
    def _teardown_error(path: Path, exc: OSError) -> FixtureTeardownError:
        remaining = _count_entries(path)
        log_event(
            logger,
            "error",
            "scratch_dir_cleanup_failed",
            path=str(path),
            remaining_entries=remaining,
            error=str(exc),
        )
        left = "unknown number of" if remaining is None else str(remaining)
        return FixtureTeardownError(
            f"Could not remove scratch directory {path} ({left} entries left behind): {exc}",
            path,
            remaining_entries=remaining,
        )


def _count_entries(path: Path) -> int | None:
    try:
        return sum(1 for _ in path.rglob("*"))
    except OSError:
        return None


@contextmanager
def scratch_directory(
    base_dir: Path | str | None = None,
    prefix: str | None = None,
    config: RuntimeConfig | None = None,
) -> Iterator[Path]:
    fixture = ScratchDirectoryFixture(base_dir=base_dir, prefix=prefix, config=config)
    root = fixture.prepare()
    try:
        yield root
    finally:
        fixture.cleanup()
