"""In-memory session store."""

from __future__ import annotations

import asyncio
import time
from typing import Callable


class MemorySessionStore:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = asyncio.Lock()
        self._clock = clock
        self._sessions: dict[str, tuple[str, float]] = {}

    def _live_value(self, principal_id: str) -> str | None:
        record = self._sessions.get(principal_id)
        if not record:
            return None
        value, expires_at = record
        if expires_at <= self._clock():
            del self._sessions[principal_id]
            return None
        return value

    async def put(self, principal_id: str, raw_refresh_token: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._sessions[principal_id] = (raw_refresh_token, self._clock() + ttl_seconds)

    async def get(self, principal_id: str) -> str | None:
        async with self._lock:
            return self._live_value(principal_id)

    async def delete(self, principal_id: str) -> None:
        async with self._lock:
            self._sessions.pop(principal_id, None)

    async def compare_and_swap(
        self, principal_id: str, expected: str, new_value: str, ttl_seconds: int
    ) -> bool:
        async with self._lock:
            if self._live_value(principal_id) != expected:
                return False
            self._sessions[principal_id] = (new_value, self._clock() + ttl_seconds)
            return True

    async def close(self) -> None:
        async with self._lock:
            self._sessions.clear()
