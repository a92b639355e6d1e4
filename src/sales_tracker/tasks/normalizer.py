# src/sales_tracker/tasks/normalizer.py

from __future__ import annotations

"""
Normalizer.

Turns loosely-typed external records (decoded JSON) into valid Task entities.
Nothing here raises on bad data: every field is coerced to its documented
default instead.
"""

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from ..core.ports import Clock, IdGenerator, SystemClock, UuidIdGenerator
from .task_models import DEFAULT_TITLE, Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def to_number(raw: Any) -> float:
    """
    Loose numeric conversion. Returns NaN when the value is not a number.

    None and blank strings convert to 0, booleans to 0/1.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        try:
            return float(raw)
        except OverflowError:
            return math.nan
    if isinstance(raw, str):
        s = raw.strip()
        if not s:
            return 0.0
        try:
            return float(s)
        except ValueError:
            return math.nan
    return math.nan


def coerce_revenue(raw: Any) -> float:
    value = to_number(raw)
    return value if math.isfinite(value) else 0.0


def coerce_time_taken(raw: Any) -> float:
    value = to_number(raw)
    return value if math.isfinite(value) and value > 0 else 1.0


def coerce_title(raw: Any) -> str:
    if isinstance(raw, str) and raw.strip():
        return raw
    return DEFAULT_TITLE


def coerce_notes(raw: Any) -> str | None:
    if raw is None:
        return None
    return raw if isinstance(raw, str) else str(raw)


def parse_instant(raw: Any) -> datetime | None:
    """
    Parse an instant from ISO-8601 text, epoch milliseconds or a datetime.

    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, (int, float)):
        if not math.isfinite(raw):
            return None
        try:
            value = datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offset pushes the instant outside the datetime range.
        return None


def shift_instant(value: datetime, delta: timedelta) -> datetime:
    """value + delta, or value unchanged when the sum leaves the datetime range."""
    try:
        return value + delta
    except OverflowError:
        return value


def _coerce_id(raw: Any, ids: IdGenerator) -> str:
    if isinstance(raw, str) and raw.strip():
        return raw
    return ids.new_id()


def normalize_task(
    raw: Mapping[str, Any],
    idx: int,
    *,
    now: datetime,
    ids: IdGenerator,
) -> Task:
    """Normalize one record at batch position `idx`."""
    created_at = parse_instant(raw.get("createdAt"))
    if created_at is None:
        created_at = shift_instant(now, -(idx + 1) * ONE_DAY)

    status = TaskStatus.from_raw(raw.get("status"))

    # Load-time backfill, not a tracked transition.
    completed_at = parse_instant(raw.get("completedAt"))
    if completed_at is None and status is TaskStatus.DONE:
        completed_at = shift_instant(created_at, ONE_DAY)

    return Task(
        id=_coerce_id(raw.get("id"), ids),
        title=coerce_title(raw.get("title")),
        revenue=coerce_revenue(raw.get("revenue")),
        time_taken=coerce_time_taken(raw.get("timeTaken")),
        priority=Priority.from_raw(raw.get("priority")),
        status=status,
        notes=coerce_notes(raw.get("notes")),
        created_at=created_at,
        completed_at=completed_at,
    )


def normalize_tasks(
    raw: Any,
    *,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> list[Task]:
    """
    Normalize a decoded JSON payload into a list of tasks.

    - non-list input -> []
    - missing createdAt -> now - (idx + 1) days (strictly decreasing across the batch)
    - missing completedAt on a Done record -> createdAt + 1 day
    - duplicate ids within the batch -> later records get a fresh id
    """
    if not isinstance(raw, list):
        return []

    clock = clock or SystemClock()
    ids = ids or UuidIdGenerator()
    now = clock.now()

    out: list[Task] = []
    seen: set[str] = set()

    for idx, item in enumerate(raw):
        record: Mapping[str, Any] = item if isinstance(item, Mapping) else {}
        task = normalize_task(record, idx, now=now, ids=ids)

        if task.id in seen:
            fresh = ids.new_id()
            while fresh in seen:
                fresh = ids.new_id()
            logger.debug("Duplicate task id=%s at idx=%s; reassigned id=%s", task.id, idx, fresh)
            task.id = fresh
        seen.add(task.id)

        if task.title == "":
            continue
        out.append(task)

    logger.debug("Normalized %d of %d raw records", len(out), len(raw))
    return out
