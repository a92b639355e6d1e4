# src/sales_tracker/tasks/metrics.py

from __future__ import annotations

"""
Metrics engine.

Pure functions over a snapshot of tasks. Sums go through math.fsum, so the
result does not depend on the order of the tasks. When fsum cannot represent
an intermediate (overflow, or +inf and -inf in one sum) the values are summed
in sorted order instead, which may yield inf or nan but never raises.

Definitions:
- roi (per task)        = revenue / time_taken
- average_roi           = mean of per-task roi
- revenue_per_hour      = total_revenue / total_time_taken (0 when no time)
- time_efficiency_pct   = 100 * time spent on Done tasks / total time, in [0, 100]
- performance_grade     = step function of average_roi (GRADE_THRESHOLDS)
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import replace

from .task_models import NEUTRAL_METRICS, DerivedTask, Metrics, PerformanceGrade, Task, TaskStatus

DEFAULT_HIGH_VALUE_ROI = 200.0

# (minimum average ROI, grade), highest first.
GRADE_THRESHOLDS: tuple[tuple[float, PerformanceGrade], ...] = (
    (500.0, PerformanceGrade.EXCELLENT),
    (200.0, PerformanceGrade.GOOD),
    (100.0, PerformanceGrade.FAIR),
)


def _total(values: Iterable[float]) -> float:
    values = list(values)
    try:
        return math.fsum(values)
    except (OverflowError, ValueError):
        return sum(sorted(values))


def compute_roi(task: Task) -> float:
    # time_taken > 0 is a Task invariant.
    return task.revenue / task.time_taken


def with_derived(task: Task, *, high_value_roi: float = DEFAULT_HIGH_VALUE_ROI) -> DerivedTask:
    """Attach computed fields to a copy of `task`."""
    roi = compute_roi(task)
    return DerivedTask(
        task=replace(task),
        roi=roi,
        revenue_per_hour=roi,
        is_high_value=roi >= high_value_roi,
    )


def compute_total_revenue(tasks: Sequence[Task]) -> float:
    return _total(t.revenue for t in tasks)


def compute_total_time_taken(tasks: Sequence[Task]) -> float:
    return _total(t.time_taken for t in tasks)


def compute_revenue_per_hour(tasks: Sequence[Task]) -> float:
    total_time = compute_total_time_taken(tasks)
    if total_time <= 0:
        return 0.0
    return compute_total_revenue(tasks) / total_time


def compute_average_roi(tasks: Sequence[Task]) -> float:
    if not tasks:
        return 0.0
    return _total(compute_roi(t) for t in tasks) / len(tasks)


def compute_time_efficiency(tasks: Sequence[Task]) -> float:
    total_time = compute_total_time_taken(tasks)
    if total_time <= 0:
        return 0.0
    done_time = _total(t.time_taken for t in tasks if t.status is TaskStatus.DONE)
    share = done_time / total_time
    if math.isnan(share):
        # Both sums overflowed.
        return 0.0
    return max(0.0, min(100.0, 100.0 * share))


def compute_performance_grade(average_roi: float) -> PerformanceGrade:
    for threshold, grade in GRADE_THRESHOLDS:
        if average_roi >= threshold:
            return grade
    return PerformanceGrade.NEEDS_IMPROVEMENT


def compute_metrics(tasks: Sequence[Task]) -> Metrics:
    if not tasks:
        return NEUTRAL_METRICS

    average_roi = compute_average_roi(tasks)
    return Metrics(
        total_revenue=compute_total_revenue(tasks),
        total_time_taken=compute_total_time_taken(tasks),
        time_efficiency_pct=compute_time_efficiency(tasks),
        revenue_per_hour=compute_revenue_per_hour(tasks),
        average_roi=average_roi,
        performance_grade=compute_performance_grade(average_roi),
    )
