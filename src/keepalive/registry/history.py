"""Bounded in-memory log of recent probe results per link."""

from __future__ import annotations

import asyncio
from collections import deque

from keepalive.registry.models import ProbeResult


class ProbeHistory:
    """Ring buffer of the most recent probes for each link code. Not persisted."""

    def __init__(self, max_per_link: int = 50) -> None:
        self._max_per_link = max_per_link
        self._results: dict[str, deque[ProbeResult]] = {}
        self._lock = asyncio.Lock()

    async def record(self, code: str, result: ProbeResult) -> None:
        async with self._lock:
            key = code.upper()
            if key not in self._results:
                self._results[key] = deque(maxlen=self._max_per_link)
            self._results[key].append(result)

    async def get_recent(self, code: str, limit: int = 20) -> list[ProbeResult]:
        """Most recent first."""
        async with self._lock:
            results = list(self._results.get(code.upper(), ()))
            results.reverse()
            return results[:limit]

    async def forget(self, code: str) -> None:
        async with self._lock:
            self._results.pop(code.upper(), None)
