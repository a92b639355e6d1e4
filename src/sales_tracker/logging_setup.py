# src/sales_tracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

APP_LOGGER = __name__.partition(".")[0]

# Chatty client libraries kept at WARNING everywhere.
QUIET_LOGGERS = ("httpx", "httpcore")

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """Console shows everything from the app logger tree, only errors from the rest."""

    def __init__(self, app_logger: str = APP_LOGGER) -> None:
        super().__init__()
        self._prefix = app_logger + "."
        self._app_logger = app_logger

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == self._app_logger or record.name.startswith(self._prefix):
            return True
        return record.levelno >= logging.ERROR


def level_from_name(name: Any, default: int = logging.INFO) -> int:
    """'debug' / 'INFO' / 10 -> logging level; unknown names give `default`."""
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


def log_file_for(settings: Any) -> Path:
    """<data_dir>/<app_name>.log"""
    data_dir = Path(getattr(settings, "data_dir", ".local/sales"))
    app_name = str(getattr(settings, "app_name", "") or "sales-tracker")
    return data_dir / f"{app_name}.log"


def setup_logging(settings: Any, *, file_level: int = logging.DEBUG) -> Path:
    """
    Route app logs to stderr (at settings.log_level, filtered) and to a
    per-app file under settings.data_dir (at `file_level`).

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output. Returns the log file path.
    """
    log_file = log_file_for(settings)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level_from_name(getattr(settings, "log_level", "INFO")))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # warnings.warn(...) lands in the file as 'py.warnings'.
    logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_file
