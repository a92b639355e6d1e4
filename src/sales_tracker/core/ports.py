# src/sales_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task core.

The store and the normalizer depend on Protocols instead of concrete
implementations, so time, identifiers and the data source can be swapped
for deterministic fakes in tests.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Protocol


class Clock(Protocol):
    """Source of the current instant (timezone-aware, UTC)."""
    def now(self) -> datetime: ...


class IdGenerator(Protocol):
    def new_id(self) -> str: ...


class TaskSource(Protocol):
    """
    Where the initial raw task records come from.

    Returns the decoded JSON payload. Implementations raise TaskSourceError
    for transport failures, non-success statuses and malformed payloads.
    """

    async def fetch_raw(self) -> Any: ...

    @property
    def name(self) -> str: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class UuidIdGenerator:
    def new_id(self) -> str:
        return str(uuid.uuid4())
