"""Auth dependency helpers."""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import Header, HTTPException, Response, status

from tokenauth.config import AuthConfig
from tokenauth.exceptions import AuthException
from tokenauth.interfaces.session_store import SessionStore
from tokenauth.models import TokenClaims
from tokenauth.security import TokenSigner
from tokenauth.services.token_service import TokenLifecycleManager
from tokenauth.stores import build_session_store

logger = logging.getLogger(__name__)

_config: AuthConfig | None = None
_session_store: SessionStore | None = None
_token_manager: TokenLifecycleManager | None = None


def get_config() -> AuthConfig:
    global _config
    if _config is None:
        _config = AuthConfig()
        _config.validate()
    return _config


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store is None:
        config = get_config()
        _session_store = build_session_store(config)
        logger.info("Using %s session store", config.AUTH_STORE)
    return _session_store


def get_token_manager() -> TokenLifecycleManager:
    global _token_manager
    if _token_manager is None:
        config = get_config()
        _token_manager = TokenLifecycleManager(
            config=config,
            signer=TokenSigner(config),
            session_store=get_session_store(),
        )
    return _token_manager


def configure(config: AuthConfig, session_store: SessionStore | None = None) -> TokenLifecycleManager:
    """Replace the process-wide configuration, store and manager."""
    global _config, _session_store, _token_manager
    config.validate()
    _config = config
    _session_store = session_store or build_session_store(config)
    _token_manager = None
    return get_token_manager()


async def shutdown() -> None:
    global _session_store, _token_manager
    if _session_store is not None:
        await _session_store.close()
    _session_store = None
    _token_manager = None


def raise_http(exc: AuthException) -> NoReturn:
    raise HTTPException(
        status_code=exc.status_code,
        detail={"message": exc.message, "kind": exc.kind.value},
    ) from exc


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing")
    return token.strip()


def get_current_claims(authorization: str | None = Header(default=None)) -> TokenClaims:
    token = bearer_token(authorization)
    try:
        return get_token_manager().verify_access(token)
    except AuthException as exc:
        raise_http(exc)


def set_refresh_cookie(response: Response, value: str) -> None:
    config = get_config()
    response.set_cookie(
        key=config.COOKIE_NAME,
        value=value,
        max_age=config.REFRESH_TOKEN_EXPIRE_SECONDS,
        httponly=config.COOKIE_HTTP_ONLY,
        secure=config.COOKIE_SECURE,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )


def clear_refresh_cookie(response: Response) -> None:
    config = get_config()
    response.delete_cookie(
        key=config.COOKIE_NAME,
        httponly=config.COOKIE_HTTP_ONLY,
        secure=config.COOKIE_SECURE,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )
