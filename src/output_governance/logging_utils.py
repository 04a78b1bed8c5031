"""Console and file logging for the CLI and long-running job hosts."""

from __future__ import annotations

import logging
from pathlib import Path

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER_NAME = "output_governance"

# Marks handlers installed here so reconfiguring never removes a host's own handlers.
_HANDLER_MARKER = "_output_governance_handler"


def resolve_level(level: int | str) -> int:
    """Accept a numeric level or a level name such as ``"debug"``."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level}")
    return resolved


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _HANDLER_MARKER, False)]


def configure_logging(
    log_file: Path | None,
    level: int | str = logging.INFO,
    *,
    console: bool = True,
) -> logging.Logger:
    """Install console and/or file handlers on the root logger and return the package logger.

    Calling it again replaces the handlers from the previous call; handlers
    added by anything else are left alone.
    """

    numeric_level = resolve_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in _owned_handlers(root_logger):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=DEFAULT_LOG_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        setattr(handler, _HANDLER_MARKER, True)
        root_logger.addHandler(handler)

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.debug("logging.configured level=%s log_file=%s", logging.getLevelName(numeric_level), log_file)
    return logger
