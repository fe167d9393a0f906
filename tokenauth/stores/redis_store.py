"""Redis-backed session store."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from tokenauth.config import AuthConfig
from tokenauth.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

# Replace the stored refresh token only if it is still the one presented.
COMPARE_AND_SWAP_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if current ~= ARGV[1] then
    return 0
end
redis.call('SET', KEYS[1], ARGV[2], 'EX', tonumber(ARGV[3]))
return 1
"""


class RedisSessionStore:
    """Session store backed by Redis.

    Keys are ``{SESSION_KEY_PREFIX}{principal_id}``; Redis expires them after the
    refresh-token lifetime. The client pools connections and reconnects on
    failure, so one instance serves the whole process.
    """

    def __init__(self, config: AuthConfig, client: aioredis.Redis | None = None) -> None:
        self._prefix = config.SESSION_KEY_PREFIX
        self._client = client or aioredis.from_url(
            config.REDIS_URL,
            decode_responses=True,
            socket_timeout=config.STORE_TIMEOUT_SECONDS,
            socket_connect_timeout=config.STORE_TIMEOUT_SECONDS,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        self._compare_and_swap = self._client.register_script(COMPARE_AND_SWAP_SCRIPT)

    def _key(self, principal_id: str) -> str:
        return f"{self._prefix}{principal_id}"

    async def put(self, principal_id: str, raw_refresh_token: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(self._key(principal_id), raw_refresh_token, ex=ttl_seconds)
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis SET failed: {exc}") from exc

    async def get(self, principal_id: str) -> str | None:
        try:
            return await self._client.get(self._key(principal_id))
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis GET failed: {exc}") from exc

    async def delete(self, principal_id: str) -> None:
        try:
            await self._client.delete(self._key(principal_id))
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis DEL failed: {exc}") from exc

    async def compare_and_swap(
        self, principal_id: str, expected: str, new_value: str, ttl_seconds: int
    ) -> bool:
        try:
            result = await self._compare_and_swap(
                keys=[self._key(principal_id)],
                args=[expected, new_value, ttl_seconds],
            )
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis compare-and-swap failed: {exc}") from exc
        return int(result) == 1

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis session store closed")
