from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv


DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "auto"
DEFAULT_PREFIX = "scratch-"
DEFAULT_DIR_MODE = 0o700

_VALID_LOG_FORMATS = {"auto", "json", "console"}
_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


@dataclass(frozen=True)
class RuntimeConfig:
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    base_dir: str | None = None
    prefix: str = DEFAULT_PREFIX
    dir_mode: int = DEFAULT_DIR_MODE


def normalize_log_level(value: str) -> str:
    level = str(value).strip().upper()
    if level in _VALID_LOG_LEVELS:
        return level

    # Also allow numeric logging levels.
    try:
        numeric = int(level)
    except ValueError as exc:
        raise ValueError(
            f"Invalid SCRATCH_FIXTURE_LOG_LEVEL '{value}'. "
            f"Expected one of {sorted(_VALID_LOG_LEVELS)} or a numeric level."
        ) from exc

    if numeric < 0:
        raise ValueError(
            f"Invalid SCRATCH_FIXTURE_LOG_LEVEL '{value}'. Numeric levels must be >= 0."
        )
    return str(numeric)


def normalize_log_format(value: str) -> str:
    fmt = str(value).strip().lower()
    if fmt not in _VALID_LOG_FORMATS:
        raise ValueError(
            f"Invalid SCRATCH_FIXTURE_LOG_FORMAT '{value}'. "
            f"Expected one of {sorted(_VALID_LOG_FORMATS)}."
        )
    return fmt


def parse_optional_dir(value: str, *, env_var: str) -> str | None:
    stripped = str(value).strip()
    if not stripped:
        return None
    path = Path(stripped).expanduser()
    if not path.is_absolute():
        raise ValueError(f"Invalid {env_var} '{value}'. Expected an absolute path.")
    return str(path)


def check_prefix(prefix: str, *, source: str = "prefix") -> str:
    separators = {"/", os.sep} | ({os.altsep} if os.altsep else set())
    if any(sep in prefix for sep in separators):
        raise ValueError(f"Invalid {source} '{prefix}'. Prefix must not contain path separators.")
    return prefix


def check_dir_mode(mode: int, *, source: str = "dir_mode") -> int:
    if mode < 0 or mode > 0o777:
        raise ValueError(f"Invalid {source} '{mode:o}'. Value must be between 000 and 777.")
    if mode & 0o700 != 0o700:
        raise ValueError(
            f"Invalid {source} '{mode:o}'. Owner must keep read, write and execute bits."
        )
    return mode


def parse_prefix(value: str, *, env_var: str) -> str:
    return check_prefix(str(value).strip(), source=env_var)


def parse_dir_mode(value: str, *, env_var: str) -> int:
    try:
        mode = int(str(value).strip(), 8)
    except ValueError as exc:
        raise ValueError(f"Invalid {env_var} '{value}'. Expected octal permission bits.") from exc
    return check_dir_mode(mode, source=env_var)


def load_runtime_config(env: Mapping[str, str] | None = None) -> RuntimeConfig:
    if env is None:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    source = env if env is not None else os.environ

    log_level = normalize_log_level(source.get("SCRATCH_FIXTURE_LOG_LEVEL", DEFAULT_LOG_LEVEL))
    log_format = normalize_log_format(
        source.get("SCRATCH_FIXTURE_LOG_FORMAT", DEFAULT_LOG_FORMAT)
    )
    base_dir = parse_optional_dir(
        source.get("SCRATCH_FIXTURE_BASE_DIR", ""),
        env_var="SCRATCH_FIXTURE_BASE_DIR",
    )
    prefix = parse_prefix(
        source.get("SCRATCH_FIXTURE_PREFIX", DEFAULT_PREFIX),
        env_var="SCRATCH_FIXTURE_PREFIX",
    )
    dir_mode = parse_dir_mode(
        source.get("SCRATCH_FIXTURE_DIR_MODE", f"{DEFAULT_DIR_MODE:o}"),
        env_var="SCRATCH_FIXTURE_DIR_MODE",
    )

    return RuntimeConfig(
        log_level=log_level,
        log_format=log_format,
        base_dir=base_dir,
        prefix=prefix,
        dir_mode=dir_mode,
    )
