"""Auth configuration management."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from tokenauth.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Load .env file before reading config
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)
else:
    load_dotenv(override=True)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


PLACEHOLDER_ACCESS_KEY = "insecure-access-key-change-me"
PLACEHOLDER_REFRESH_KEY = "insecure-refresh-key-change-me"
SUPPORTED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


@dataclass(frozen=True)
class AuthConfig:
    """Configuration values for token issuance, rotation and the session store.

    Defaults are read from the environment when the module is imported. Build an
    instance with keyword overrides to inject a different configuration.
    """

    ENVIRONMENT: str = os.getenv("AUTH_ENVIRONMENT", "development")

    ACCESS_KEY: str = os.getenv("ACCESS_KEY", PLACEHOLDER_ACCESS_KEY)
    REFRESH_KEY: str = os.getenv("REFRESH_KEY", PLACEHOLDER_REFRESH_KEY)
    JWT_ALGORITHM: str = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
    JWT_ISSUER: str | None = os.getenv("AUTH_JWT_ISSUER")
    JWT_AUDIENCE: str | None = os.getenv("AUTH_JWT_AUDIENCE")

    ACCESS_TOKEN_EXPIRE_SECONDS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_SECONDS", "900"))
    REFRESH_TOKEN_EXPIRE_SECONDS: int = int(
        os.getenv("REFRESH_TOKEN_EXPIRE_SECONDS", str(7 * 24 * 60 * 60))
    )

    # Session store: "redis" (production) or "memory" (testing)
    AUTH_STORE: str = os.getenv("AUTH_STORE", "redis")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    SESSION_KEY_PREFIX: str = os.getenv("SESSION_KEY_PREFIX", "refresh:")
    STORE_TIMEOUT_SECONDS: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "2.0"))
    STORE_RETRY_ATTEMPTS: int = int(os.getenv("STORE_RETRY_ATTEMPTS", "2"))
    STORE_RETRY_BACKOFF_SECONDS: float = float(os.getenv("STORE_RETRY_BACKOFF_SECONDS", "0.05"))

    ATOMIC_ROTATION: bool = _parse_bool(os.getenv("ATOMIC_ROTATION"), False)
    REVOKE_REQUIRES_MATCH: bool = _parse_bool(os.getenv("REVOKE_REQUIRES_MATCH"), False)

    COOKIE_NAME: str = os.getenv("REFRESH_COOKIE_NAME", "refreshToken")
    COOKIE_SECURE: bool = _parse_bool(os.getenv("COOKIE_SECURE"), False)
    COOKIE_HTTP_ONLY: bool = _parse_bool(os.getenv("COOKIE_HTTP_ONLY"), True)
    COOKIE_SAMESITE: str = os.getenv("COOKIE_SAME_SITE", "strict")
    COOKIE_DOMAIN: str | None = os.getenv("COOKIE_DOMAIN")

    # Principal handed out by the demo login route
    DEMO_USERNAME: str = os.getenv("DEMO_USERNAME", "Jane Doe")
    DEMO_ROLE: str = os.getenv("DEMO_ROLE", "admin")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def uses_placeholder_keys(self) -> bool:
        return self.ACCESS_KEY == PLACEHOLDER_ACCESS_KEY or self.REFRESH_KEY == PLACEHOLDER_REFRESH_KEY

    def validate(self) -> None:
        """Validate signing and lifetime settings."""
        if self.JWT_ALGORITHM not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported signing algorithm {self.JWT_ALGORITHM!r}; "
                f"expected one of {sorted(SUPPORTED_ALGORITHMS)}"
            )
        if not self.ACCESS_KEY or not self.REFRESH_KEY:
            raise ConfigurationError("ACCESS_KEY and REFRESH_KEY must be set")
        if self.ACCESS_KEY == self.REFRESH_KEY:
            raise ConfigurationError("ACCESS_KEY and REFRESH_KEY must differ")
        if self.ACCESS_TOKEN_EXPIRE_SECONDS <= 0 or self.REFRESH_TOKEN_EXPIRE_SECONDS <= 0:
            raise ConfigurationError("Token lifetimes must be positive")
        if self.uses_placeholder_keys:
            if self.is_production:
                raise ConfigurationError(
                    "Placeholder signing keys are not allowed in production.\n"
                    "Set ACCESS_KEY and REFRESH_KEY in the environment or the .env file."
                )
            logger.warning("Using placeholder signing keys; do not deploy this configuration")
