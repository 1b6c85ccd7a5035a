"""Logging utilities for autodocs commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

_LOGGER_NAME = "autodocs"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the autodocs hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the autodocs logger with console output and an optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # The CLI and the service may both configure logging in one process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[autodocs] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


_EVENT_LEVELS = {
    "start": logging.INFO,
    "progress": logging.DEBUG,
    "skip": logging.WARNING,
    "error": logging.ERROR,
    "complete": logging.INFO,
}


def event_logger(logger: logging.Logger | None = None) -> Callable[[Any], None]:
    """Return a pipeline event callback that forwards events to *logger*."""
    target = logger or get_logger("events")

    def _emit(event: Any) -> None:
        level = _EVENT_LEVELS.get(getattr(event, "type", ""), logging.DEBUG)
        current = getattr(event, "current", 0)
        total = getattr(event, "total", 0)
        prefix = f"[{current}/{total}] " if total else ""
        target.log(level, "%s%s", prefix, getattr(event, "message", ""))

    return _emit


__all__ = ["configure_logging", "event_logger", "get_logger"]
