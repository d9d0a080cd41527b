"""Optional diagnostic log file for the whole feq package."""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

PACKAGE_LOGGER = "feq"
ENV_DEBUG_LOG = "FEQ_LOG_PATH"

MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5
FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def enable_debug_log(
    log_path: Optional[str] = None,
    level: Union[int, str] = logging.DEBUG,
    logger_name: str = PACKAGE_LOGGER,
) -> RotatingFileHandler:
    """
    Route every "feq.*" logger into a rotating file.

    The path falls back to $FEQ_LOG_PATH, then "feq.log". Enabling the same
    file twice reuses its handler and only updates the level. The observer
    thread logs too, so records carry the thread name.
    """
    path = os.path.abspath(log_path or os.environ.get(ENV_DEBUG_LOG) or "feq.log")
    level = _resolve_level(level)
    target = logging.getLogger(logger_name)
    target.setLevel(level)

    for existing in target.handlers:
        if isinstance(existing, RotatingFileHandler) and os.path.normcase(
            existing.baseFilename
        ) == os.path.normcase(path):
            existing.setLevel(level)
            return existing

    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    target.addHandler(handler)
    return handler


def disable_debug_log(handler: RotatingFileHandler, logger_name: str = PACKAGE_LOGGER) -> None:
    """Detach and close a handler returned by enable_debug_log."""
    logging.getLogger(logger_name).removeHandler(handler)
    handler.close()
