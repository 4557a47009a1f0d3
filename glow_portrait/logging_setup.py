"""Logging setup for the glow portrait command line."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER_NAME = "glow_portrait"


def _open_log_file(log_file: Union[str, Path]) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def configure_logging(
    logger_name: Optional[str] = None,
    *,
    level: int = logging.INFO,
    log_file: Union[str, Path, None] = None,
    include_stream: bool = True,
) -> logging.Logger:
    """Send renderer log records to stderr and optionally to ``log_file``.

    ``level`` applies to the ``glow_portrait`` loggers only; everything else
    stays at WARNING so per-layer debug timings do not drag in library noise.
    Raises ``OSError`` when the log file cannot be opened.
    """
    handlers: list[logging.Handler] = []
    if log_file is not None:
        handlers.append(_open_log_file(log_file))
    if include_stream:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=logging.WARNING, handlers=handlers, force=True)

    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(level)
    logger = logging.getLogger(logger_name or PACKAGE_LOGGER_NAME)
    logger.setLevel(level)
    return logger


__all__ = ["LOG_FORMAT", "configure_logging"]
