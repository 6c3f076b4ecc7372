from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from .config import RuntimeConfig, normalize_log_format, normalize_log_level


def resolve_log_format(config: RuntimeConfig, stream: TextIO) -> str:
    """Pick the renderer for the stream pytest hands us.

    ``auto`` means console output when the terminal is interactive and JSON
    lines otherwise, which is what CI logs end up as.
    """
    fmt = normalize_log_format(config.log_format)
    if fmt != "auto":
        return fmt
    return "console" if getattr(stream, "isatty", lambda: False)() else "json"


def resolve_log_level(config: RuntimeConfig) -> int:
    level = normalize_log_level(config.log_level)
    if level.isdigit():
        return int(level)
    return logging.getLevelName(level)


def configure_logging(config: RuntimeConfig, stream: TextIO | None = None) -> str:
    """Route fixture lifecycle events to ``stream`` (stderr by default).

    Returns the renderer actually used.
    """
    out = stream if stream is not None else sys.stderr
    effective_format = resolve_log_format(config, out)

    logging.basicConfig(
        level=resolve_log_level(config), format="%(message)s", stream=out, force=True
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if effective_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.reset_defaults()
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return effective_format


def get_logger(name: str) -> Any:
    # Wrapped stdlib logger: level filtering applies even before configure_logging() runs.
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def log_event(logger: Any, level: str, event: str, **fields: Any) -> None:
    getattr(logger, level.lower())(event, **fields)
