# src/sales_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings (or any object with the same attributes, e.g. in tests).
    settings: Any

    store: TaskStore
