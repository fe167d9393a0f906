"""Session store interface for refresh tokens.

One record per principal: the raw refresh token currently allowed to rotate.
Writing a new value replaces the previous one, which is what revokes the
predecessor on rotation.
"""

from __future__ import annotations

from typing import Protocol


class SessionStore(Protocol):
    async def put(self, principal_id: str, raw_refresh_token: str, ttl_seconds: int) -> None:
        ...

    async def get(self, principal_id: str) -> str | None:
        ...

    async def delete(self, principal_id: str) -> None:
        ...

    async def compare_and_swap(
        self, principal_id: str, expected: str, new_value: str, ttl_seconds: int
    ) -> bool:
        """Replace the record only if it still holds ``expected``."""
        ...

    async def close(self) -> None:
        ...
