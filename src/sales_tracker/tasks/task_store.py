# src/sales_tracker/tasks/task_store.py

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from enum import StrEnum
from typing import Any

from ..core.ports import Clock, IdGenerator, SystemClock, TaskSource, UuidIdGenerator
from .metrics import DEFAULT_HIGH_VALUE_ROI, compute_metrics, with_derived
from .normalizer import (
    coerce_notes,
    coerce_revenue,
    coerce_time_taken,
    coerce_title,
    normalize_tasks,
    parse_instant,
)
from .ranking import rank_tasks
from .task_models import NEUTRAL_METRICS, DerivedTask, Metrics, Priority, Task, TaskInput, TaskStatus
from .task_source import TaskSourceError

logger = logging.getLogger(__name__)

SeedGenerator = Callable[[int], list[Task]]

# Patch keys accepted by update(): camelCase wire names and snake_case field names.
_PATCH_FIELDS = {
    "title": "title",
    "revenue": "revenue",
    "timeTaken": "time_taken",
    "time_taken": "time_taken",
    "priority": "priority",
    "status": "status",
    "notes": "notes",
    "completedAt": "completed_at",
    "completed_at": "completed_at",
}

# Set once at creation.
_IMMUTABLE_FIELDS = {"id", "createdAt", "created_at"}


class StoreState(StrEnum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class TaskStore:
    """
    In-memory task store.

    Owns the task list and a single-slot undo buffer. Derived views (ranked
    tasks, metrics) are cached per store version and rebuilt lazily after
    every change.

    Lifecycle:
      UNINITIALIZED --initialize()--> LOADING --> READY | FAILED
    initialize() runs at most once per store; load() replaces the task list
    directly and marks the store READY.

    Not thread-safe: callers serialize mutations (single event loop).
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
        high_value_roi: float = DEFAULT_HIGH_VALUE_ROI,
    ) -> None:
        self._clock = clock or SystemClock()
        self._ids = ids or UuidIdGenerator()
        self._high_value_roi = float(high_value_roi)

        self._tasks: list[Task] = []
        self._last_deleted: Task | None = None
        self._state = StoreState.UNINITIALIZED
        self._error: str | None = None

        self._version = 0
        self._cache_version = -1
        self._ranked: list[DerivedTask] = []
        self._metrics: Metrics = NEUTRAL_METRICS

    # ---- lifecycle ----

    async def initialize(
        self,
        source: TaskSource,
        *,
        seed: SeedGenerator | None = None,
        seed_count: int = 50,
        seed_on_failure: bool = False,
    ) -> bool:
        """
        Fetch, normalize and load the initial tasks.

        Returns False without doing anything unless the store is UNINITIALIZED.
        An empty normalization result is replaced by seed(seed_count) when a
        seed generator is given. Source failures (TaskSourceError, OSError) are
        recorded in `error` and leave the store FAILED with no tasks (or
        seeded ones if seed_on_failure).
        """
        if self._state is not StoreState.UNINITIALIZED:
            logger.debug("initialize() ignored: store is %s", self._state)
            return False

        # Flip before the first await so a concurrent call is a no-op.
        self._state = StoreState.LOADING
        self._touch()

        try:
            raw = await source.fetch_raw()
        except (TaskSourceError, OSError) as e:
            self._error = str(e) or "Failed to load tasks"
            logger.warning("Task load failed: %s", self._error)
            fallback = seed(seed_count) if (seed is not None and seed_on_failure) else []
            self._tasks = list(fallback)
            self._state = StoreState.FAILED
            self._touch()
            return True

        tasks = normalize_tasks(raw, clock=self._clock, ids=self._ids)
        if not tasks and seed is not None:
            logger.info("No usable tasks in %s; generating %d seed tasks", source.name, seed_count)
            tasks = seed(seed_count)

        self.load(tasks)
        logger.info("TaskStore ready source=%s total=%d", source.name, len(self._tasks))
        return True

    def load(self, initial: list[Task]) -> None:
        """Replace the whole collection."""
        self._tasks = list(initial)
        self._state = StoreState.READY
        self._touch()

    # ---- read accessors ----

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def ids(self) -> IdGenerator:
        return self._ids

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state in (StoreState.UNINITIALIZED, StoreState.LOADING)

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(replace(t) for t in self._tasks)

    @property
    def last_deleted(self) -> Task | None:
        return replace(self._last_deleted) if self._last_deleted is not None else None

    @property
    def ranked_derived_tasks(self) -> list[DerivedTask]:
        if self.loading:
            return []
        self._recompute()
        return [replace(d, task=replace(d.task)) for d in self._ranked]

    @property
    def metrics(self) -> Metrics:
        if self.loading:
            return NEUTRAL_METRICS
        self._recompute()
        return self._metrics

    def get(self, task_id: str) -> Task | None:
        t = self._find(task_id)
        return replace(t) if t is not None else None

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- mutations ----

    def add(self, task_input: TaskInput) -> str:
        """Append a new task; returns its id."""
        now = self._clock.now()
        status = TaskStatus.from_raw(task_input.status)

        task_id = task_input.id
        if not isinstance(task_id, str) or not task_id.strip() or self._id_taken(task_id):
            task_id = self._new_unique_id()

        task = Task(
            id=task_id,
            title=coerce_title(task_input.title),
            revenue=coerce_revenue(task_input.revenue),
            time_taken=coerce_time_taken(task_input.time_taken),
            priority=Priority.from_raw(task_input.priority),
            status=status,
            notes=coerce_notes(task_input.notes),
            created_at=now,
            completed_at=now if status is TaskStatus.DONE else None,
        )
        self._tasks.append(task)
        self._touch()
        logger.debug("Task added id=%s status=%s", task.id, task.status)
        return task.id

    def update(self, task_id: str, patch: Mapping[str, Any]) -> None:
        task = self._find(task_id)
        if task is None:
            logger.debug("update() ignored: unknown id=%s", task_id)
            return

        prior_status = task.status

        for key, value in patch.items():
            field = _PATCH_FIELDS.get(key)
            if field is None:
                if key not in _IMMUTABLE_FIELDS:
                    logger.debug("update() ignoring unknown field %r", key)
                continue

            if field == "title":
                task.title = coerce_title(value)
            elif field == "revenue":
                task.revenue = coerce_revenue(value)
            elif field == "time_taken":
                task.time_taken = coerce_time_taken(value)
            elif field == "priority":
                task.priority = Priority.from_raw(value)
            elif field == "status":
                task.status = TaskStatus.from_raw(value)
            elif field == "notes":
                task.notes = coerce_notes(value)
            elif field == "completed_at":
                task.completed_at = parse_instant(value)

        if prior_status is not TaskStatus.DONE and task.status is TaskStatus.DONE:
            task.completed_at = self._clock.now()

        if task.time_taken <= 0:
            task.time_taken = 1.0

        self._touch()
        logger.debug("Task updated id=%s status=%s", task.id, task.status)

    def delete(self, task_id: str) -> None:
        """Remove a task; the removed record (or None) replaces the undo slot."""
        target = self._find(task_id)
        self._last_deleted = copy.deepcopy(target)
        if target is not None:
            self._tasks = [t for t in self._tasks if t.id != task_id]
            logger.debug("Task deleted id=%s", task_id)
        self._touch()

    def undo_delete(self) -> None:
        """Re-append the buffered record at the end and clear the slot."""
        if self._last_deleted is None:
            return
        restored = self._last_deleted
        self._last_deleted = None
        self._tasks.append(restored)
        self._touch()
        logger.debug("Task restored id=%s", restored.id)

    def clear_last_deleted(self) -> None:
        if self._last_deleted is None:
            return
        self._last_deleted = None
        self._touch()

    # ---- internals ----

    def _find(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def _id_taken(self, task_id: str) -> bool:
        if self._last_deleted is not None and self._last_deleted.id == task_id:
            return True
        return self._find(task_id) is not None

    def _new_unique_id(self) -> str:
        task_id = self._ids.new_id()
        while self._id_taken(task_id):
            task_id = self._ids.new_id()
        return task_id

    def _touch(self) -> None:
        self._version += 1

    def _recompute(self) -> None:
        if self._cache_version == self._version:
            return
        snapshot = [replace(t) for t in self._tasks]
        derived = [with_derived(t, high_value_roi=self._high_value_roi) for t in snapshot]
        self._ranked = rank_tasks(derived)
        self._metrics = compute_metrics(snapshot)
        self._cache_version = self._version
