# src/sales_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

DEFAULT_TITLE = "Untitled Task"


def _fold(raw: str) -> str:
    """Lowercase and drop separators so "In Progress", "in_progress" and "inprogress" match."""
    return "".join(ch for ch in raw.lower() if ch not in " _-")


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]

    @classmethod
    def from_raw(cls, raw: Any) -> Priority:
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            return cls.MEDIUM
        folded = _fold(raw)
        for member in cls:
            if _fold(member.value) == folded:
                return member
        return cls.MEDIUM


_PRIORITY_WEIGHTS = {Priority.LOW: 0, Priority.MEDIUM: 1, Priority.HIGH: 2}


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Any status may follow any other. Only the first entry into DONE through
    TaskStore.update stamps completed_at; leaving DONE keeps it.
    """

    TODO = "Todo"
    IN_PROGRESS = "In Progress"
    DONE = "Done"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            return cls.TODO
        folded = _fold(raw)
        for member in cls:
            if _fold(member.value) == folded:
                return member
        return cls.TODO


class PerformanceGrade(StrEnum):
    # Ordered lowest -> highest.
    NEEDS_IMPROVEMENT = "Needs Improvement"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"


def isoformat_utc(value: datetime) -> str:
    """Render an instant as ISO-8601 with millisecond precision and a Z suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class Task:
    id: str
    title: str
    revenue: float
    time_taken: float
    priority: Priority
    status: TaskStatus
    created_at: datetime
    notes: str | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "revenue": self.revenue,
            "timeTaken": self.time_taken,
            "priority": self.priority.value,
            "status": self.status.value,
            "createdAt": isoformat_utc(self.created_at),
        }
        if self.notes is not None:
            out["notes"] = self.notes
        if self.completed_at is not None:
            out["completedAt"] = isoformat_utc(self.completed_at)
        return out


@dataclass(slots=True)
class TaskInput:
    """Fields accepted by TaskStore.add. Values are coerced, never rejected."""

    title: Any = DEFAULT_TITLE
    revenue: Any = 0.0
    time_taken: Any = 1.0
    priority: Any = Priority.MEDIUM
    status: Any = TaskStatus.TODO
    notes: str | None = None
    id: str | None = None


@dataclass(slots=True, frozen=True)
class DerivedTask:
    """A task snapshot plus read-only computed fields. Never written back."""

    task: Task
    roi: float
    revenue_per_hour: float
    is_high_value: bool

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def title(self) -> str:
        return self.task.title

    def to_dict(self) -> dict[str, Any]:
        out = self.task.to_dict()
        out["roi"] = self.roi
        out["revenuePerHour"] = self.revenue_per_hour
        out["isHighValue"] = self.is_high_value
        return out


@dataclass(slots=True, frozen=True)
class Metrics:
    total_revenue: float
    total_time_taken: float
    time_efficiency_pct: float
    revenue_per_hour: float
    average_roi: float
    performance_grade: PerformanceGrade

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRevenue": self.total_revenue,
            "totalTimeTaken": self.total_time_taken,
            "timeEfficiencyPct": self.time_efficiency_pct,
            "revenuePerHour": self.revenue_per_hour,
            "averageROI": self.average_roi,
            "performanceGrade": self.performance_grade.value,
        }


NEUTRAL_METRICS = Metrics(
    total_revenue=0.0,
    total_time_taken=0.0,
    time_efficiency_pct=0.0,
    revenue_per_hour=0.0,
    average_roi=0.0,
    performance_grade=PerformanceGrade.NEEDS_IMPROVEMENT,
)
