# src/sales_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the task store, the task source and the seed generator together.
"""

from __future__ import annotations

import functools

from ..config import get_settings
from ..core.ports import Clock, IdGenerator, TaskSource
from ..core.state import AppState
from ..tasks.seed import generate_sales_tasks
from ..tasks.task_source import make_task_source
from ..tasks.task_store import TaskStore


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(clock=clock, ids=ids, high_value_roi=settings.high_value_roi)
    return AppState(settings=settings, store=store)


async def load_initial_tasks(state: AppState, source: TaskSource | None = None) -> bool:
    """Run the one-time initial load. Returns False if the store was already initialized."""
    settings = state.settings
    if source is None:
        source = make_task_source(settings.tasks_source, timeout=settings.fetch_timeout_seconds)

    store = state.store
    seed = functools.partial(generate_sales_tasks, clock=store.clock, ids=store.ids)
    return await store.initialize(
        source,
        seed=seed,
        seed_count=settings.seed_task_count,
        seed_on_failure=settings.seed_on_failure,
    )
