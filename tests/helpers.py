import asyncio
from dataclasses import replace

from tokenauth.config import AuthConfig
from tokenauth.exceptions import StoreUnavailableError
from tokenauth.stores.memory_store import MemorySessionStore


BASE_CONFIG = AuthConfig(
    ENVIRONMENT="test",
    ACCESS_KEY="test-access-key",
    REFRESH_KEY="test-refresh-key",
    JWT_ALGORITHM="HS256",
    JWT_ISSUER=None,
    JWT_AUDIENCE=None,
    ACCESS_TOKEN_EXPIRE_SECONDS=60,
    REFRESH_TOKEN_EXPIRE_SECONDS=300,
    AUTH_STORE="memory",
    STORE_TIMEOUT_SECONDS=1.0,
    STORE_RETRY_ATTEMPTS=2,
    STORE_RETRY_BACKOFF_SECONDS=0.0,
    ATOMIC_ROTATION=False,
    REVOKE_REQUIRES_MATCH=False,
)


def make_config(**overrides) -> AuthConfig:
    return replace(BASE_CONFIG, **overrides)


class YieldingSessionStore(MemorySessionStore):
    """Memory store that yields to the event loop before every operation."""

    async def put(self, principal_id, raw_refresh_token, ttl_seconds):
        await asyncio.sleep(0)
        await super().put(principal_id, raw_refresh_token, ttl_seconds)

    async def get(self, principal_id):
        await asyncio.sleep(0)
        return await super().get(principal_id)

    async def delete(self, principal_id):
        await asyncio.sleep(0)
        await super().delete(principal_id)

    async def compare_and_swap(self, principal_id, expected, new_value, ttl_seconds):
        await asyncio.sleep(0)
        return await super().compare_and_swap(principal_id, expected, new_value, ttl_seconds)


class FlakySessionStore(MemorySessionStore):
    """Memory store whose first ``failures`` calls raise StoreUnavailableError."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.calls = 0

    def _maybe_fail(self) -> None:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise StoreUnavailableError("connection reset")

    async def put(self, principal_id, raw_refresh_token, ttl_seconds):
        self._maybe_fail()
        await super().put(principal_id, raw_refresh_token, ttl_seconds)

    async def get(self, principal_id):
        self._maybe_fail()
        return await super().get(principal_id)

    async def delete(self, principal_id):
        self._maybe_fail()
        await super().delete(principal_id)


class HangingSessionStore(MemorySessionStore):
    """Memory store whose reads never complete."""

    async def get(self, principal_id):
        await asyncio.Event().wait()


class LostReplySessionStore(MemorySessionStore):
    """Memory store whose swaps raise StoreUnavailableError, optionally after committing."""

    def __init__(self, commit: bool) -> None:
        super().__init__()
        self.commit = commit
        self.swap_calls = 0

    async def compare_and_swap(self, principal_id, expected, new_value, ttl_seconds):
        self.swap_calls += 1
        if self.commit:
            await super().compare_and_swap(principal_id, expected, new_value, ttl_seconds)
        raise StoreUnavailableError("reply lost")


class BrokenPutSessionStore(MemorySessionStore):
    """Memory store whose writes fail once ``broken`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.broken = False

    async def put(self, principal_id, raw_refresh_token, ttl_seconds):
        if self.broken:
            raise StoreUnavailableError("write refused")
        await super().put(principal_id, raw_refresh_token, ttl_seconds)
