# src/sales_tracker/tasks/task_source.py

from __future__ import annotations

"""
Task sources: where the initial raw records come from.

Both sources return the decoded JSON array and raise TaskSourceError for any
failure the caller should surface as a message (non-success status, missing
file, malformed JSON, non-array payload).
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)


class TaskSourceError(RuntimeError):
    """Loading the initial task payload failed."""


def _check_payload(payload: Any, name: str) -> list[Any]:
    if not isinstance(payload, list):
        raise TaskSourceError(f"Malformed {name}: expected a JSON array")
    return payload


class HttpTaskSource:
    """Fetch the task array over HTTP(S)."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        path = urlparse(self._url).path
        return path.rsplit("/", 1)[-1] or self._url

    async def fetch_raw(self) -> list[Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._url)
        except httpx.HTTPError as e:
            logger.warning("Task fetch failed url=%s: %s", self._url, e)
            raise TaskSourceError(f"Failed to load {self.name} ({e.__class__.__name__})") from e

        if not response.is_success:
            raise TaskSourceError(f"Failed to load {self.name} ({response.status_code})")

        try:
            payload = response.json()
        except ValueError as e:
            raise TaskSourceError(f"Malformed {self.name}: invalid JSON") from e

        logger.debug("Fetched %s status=%s", self._url, response.status_code)
        return _check_payload(payload, self.name)


class FileTaskSource:
    """Read the task array from a local JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def name(self) -> str:
        return self._path.name

    async def fetch_raw(self) -> list[Any]:
        if not self._path.is_file():
            raise TaskSourceError(f"Failed to load {self.name} (not found)")

        try:
            text = await asyncio.to_thread(self._path.read_text, "utf-8")
        except OSError as e:
            raise TaskSourceError(f"Failed to load {self.name} ({e.strerror or e})") from e

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise TaskSourceError(f"Malformed {self.name}: invalid JSON") from e

        return _check_payload(payload, self.name)


def make_task_source(location: str | Path, *, timeout: float = 10.0) -> HttpTaskSource | FileTaskSource:
    loc = str(location)
    if loc.startswith(("http://", "https://")):
        return HttpTaskSource(loc, timeout=timeout)
    return FileTaskSource(Path(loc).expanduser())
