# src/sales_tracker/tasks/ranking.py

from __future__ import annotations

from collections.abc import Iterable

from .task_models import DerivedTask


def rank_key(d: DerivedTask) -> tuple[float, int, float, str]:
    """
    Total order used for ranking:
      1. roi descending
      2. priority descending (High > Medium > Low)
      3. created_at descending
      4. id ascending
    """
    return (-d.roi, -d.task.priority.weight, -d.task.created_at.timestamp(), d.task.id)


def rank_tasks(derived: Iterable[DerivedTask]) -> list[DerivedTask]:
    return sorted(derived, key=rank_key)
