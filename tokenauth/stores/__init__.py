"""Session store implementations."""

from __future__ import annotations

from tokenauth.config import AuthConfig
from tokenauth.exceptions import ConfigurationError
from tokenauth.interfaces.session_store import SessionStore
from tokenauth.stores.memory_store import MemorySessionStore
from tokenauth.stores.redis_store import RedisSessionStore


def build_session_store(config: AuthConfig) -> SessionStore:
    """Get the session store selected by AUTH_STORE."""
    if config.AUTH_STORE == "redis":
        return RedisSessionStore(config)
    if config.AUTH_STORE == "memory":
        return MemorySessionStore()
    raise ConfigurationError(f"Unknown AUTH_STORE {config.AUTH_STORE!r}")


__all__ = ["MemorySessionStore", "RedisSessionStore", "build_session_store"]
