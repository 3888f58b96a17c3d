from __future__ import annotations

import logging
import os
import traceback
from datetime import datetime
from pathlib import Path

_LOGGER = logging.getLogger("retrosfx.logging")
_LOG_DIR_ENV = "RETROSFX_LOG_DIR"
_LOG_LEVEL_ENV = "RETROSFX_LOG_LEVEL"
_LOG_FILE = "retrosfx.log"
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def get_log_dir() -> Path:
    configured = os.environ.get(_LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "retrosfx" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / _LOG_FILE


def _resolve_level(default: int) -> int:
    configured = os.environ.get(_LOG_LEVEL_ENV)
    if not configured:
        return default
    level = logging.getLevelName(configured.strip().upper())
    if isinstance(level, int):
        return level
    _LOGGER.warning("Ignoring unknown %s=%r", _LOG_LEVEL_ENV, configured)
    return default


def configure_logging(level: int = logging.WARNING) -> None:
    """Attach a stderr handler to the package logger once."""

    logger = logging.getLogger("retrosfx")
    logger.setLevel(_resolve_level(level))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)


def log_exception(context: str, exc: BaseException) -> Path | None:
    try:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        path = get_log_path()
        timestamp = datetime.now().isoformat()
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{timestamp}] {context} failed: {type(exc).__name__}: {exc}\n")
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=handle)
            handle.write("\n")
        return path
    except Exception as log_exc:
        _LOGGER.warning("Failed to write log file: %s", log_exc, exc_info=True)
        return None
