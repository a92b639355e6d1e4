# src/sales_tracker/tasks/seed.py

from __future__ import annotations

"""
Synthetic sales tasks, used when the real payload yields nothing.

Output is reproducible for a given seed, clock and id generator.
"""

import logging
import random
from datetime import timedelta

from ..core.ports import Clock, IdGenerator, SystemClock, UuidIdGenerator
from .task_models import Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

_ACTIONS = (
    "Follow up with",
    "Send proposal to",
    "Demo for",
    "Renewal call with",
    "Negotiate contract with",
    "Upsell package to",
    "Onboarding session for",
    "Quarterly review with",
)

_ACCOUNTS = (
    "Acme Corp",
    "Globex",
    "Initech",
    "Umbrella Ltd",
    "Stark Industries",
    "Wayne Enterprises",
    "Hooli",
    "Vandelay Imports",
    "Soylent Co",
    "Wonka Foods",
)

_NOTES = (
    None,
    None,
    "Decision maker is the CFO.",
    "Waiting on legal review.",
    "Asked for a volume discount.",
    "Warm lead from the trade show.",
)


def generate_sales_tasks(
    n: int,
    *,
    seed: int | None = None,
    clock: Clock | None = None,
    ids: IdGenerator | None = None,
) -> list[Task]:
    clock = clock or SystemClock()
    ids = ids or UuidIdGenerator()
    rng = random.Random(seed)
    now = clock.now()

    out: list[Task] = []
    for _ in range(max(0, int(n))):
        status = rng.choice(list(TaskStatus))
        created_at = now - timedelta(days=rng.randint(1, 60), minutes=rng.randint(0, 1439))
        completed_at = None
        if status is TaskStatus.DONE:
            completed_at = min(now, created_at + timedelta(hours=rng.randint(1, 240)))

        out.append(
            Task(
                id=ids.new_id(),
                title=f"{rng.choice(_ACTIONS)} {rng.choice(_ACCOUNTS)}",
                revenue=round(rng.uniform(100.0, 10_000.0), 2),
                time_taken=round(rng.uniform(0.5, 24.0), 1),
                priority=rng.choice(list(Priority)),
                status=status,
                notes=rng.choice(_NOTES),
                created_at=created_at,
                completed_at=completed_at,
            )
        )

    logger.info("Generated %d synthetic sales tasks (seed=%s)", len(out), seed)
    return out
