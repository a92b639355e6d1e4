# src/sales_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Malformed values fall back to defaults instead of failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "SALES"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Initial load ----
    tasks_source: str
    fetch_timeout_seconds: float
    seed_task_count: int
    seed_on_failure: bool

    # ---- Metrics ----
    high_value_roi: float

    # ---- Connectors ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "sales-tracker").strip() or "sales-tracker"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/sales"))

        tasks_source = _env(_k("TASKS_SOURCE"), "tasks.json").strip() or "tasks.json"
        fetch_timeout_seconds = _env_float(_k("FETCH_TIMEOUT_SECONDS"), 10.0)
        if fetch_timeout_seconds <= 0:
            fetch_timeout_seconds = 10.0

        seed_task_count = max(0, _env_int(_k("SEED_TASK_COUNT"), 50))
        seed_on_failure = _env_bool(_k("SEED_ON_FAILURE"), False)

        high_value_roi = _env_float(_k("HIGH_VALUE_ROI"), 200.0)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_source=tasks_source,
            fetch_timeout_seconds=fetch_timeout_seconds,
            seed_task_count=seed_task_count,
            seed_on_failure=seed_on_failure,
            high_value_roi=high_value_roi,
            console_enabled=console_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
