# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from sales_tracker.core.state import AppState
from sales_tracker.tasks.task_store import TaskStore

from .fakes import FakeClock, SequentialIds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture()
def store(clock: FakeClock, ids: SequentialIds) -> TaskStore:
    return TaskStore(clock=clock, ids=ids)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="sales-tracker",
        log_level="INFO",
        data_dir=tmp_path / "data",
        tasks_source=str(tmp_path / "tasks.json"),
        fetch_timeout_seconds=5.0,
        seed_task_count=5,
        seed_on_failure=False,
        high_value_roi=200.0,
        console_enabled=False,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """AppState wired with the deterministic store (already READY, empty)."""
    store.load([])
    return AppState(settings=settings, store=store)
