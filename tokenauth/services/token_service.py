"""Token lifecycle: issue, rotate, revoke and verify."""

from __future__ import annotations

import asyncio
import hmac
import logging
from typing import Any, Awaitable, Callable, TypeVar

from tokenauth.config import AuthConfig
from tokenauth.exceptions import (
    AuthException,
    InvalidOrExpiredError,
    MalformedTokenError,
    SessionExpiredOrInvalidError,
    StoreUnavailableError,
    TokenMismatchError,
    UnauthorizedError,
)
from tokenauth.interfaces.session_store import SessionStore
from tokenauth.models import Principal, TokenClaims, TokenPair
from tokenauth.security import TokenSigner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TokenLifecycleManager:
    """Issues token pairs and rotates or revokes the refresh token of a principal.

    Each principal has at most one active refresh token. ``issue`` overwrites any
    existing session record, so logging in again ends the previous session.

    Rotation without ``ATOMIC_ROTATION`` runs get, compare, delete and put as
    separate store calls. Two concurrent rotations of the same token can both
    succeed; the store then holds whichever token was written last and the other
    caller's refresh token fails its next rotation with ``TokenMismatchError``.
    Callers should fall back to a full login on a persistent mismatch.

    Every coroutine takes an optional ``timeout`` in seconds shared by all store
    calls of the operation. Without one, each store call gets
    ``STORE_TIMEOUT_SECONDS``. A store call that times out or fails raises
    ``StoreUnavailableError`` after the configured retries. Compare-and-swap is
    never retried; after a failed swap the record is read back to see whether it
    committed.
    """

    def __init__(
        self,
        config: AuthConfig,
        signer: TokenSigner,
        session_store: SessionStore,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._signer = signer
        self._sessions = session_store
        self._sleep = sleep

    async def issue(self, principal: Principal, timeout: float | None = None) -> TokenPair:
        if not principal.username:
            raise MalformedTokenError("Principal identifier required")
        deadline = self._deadline(timeout)
        tokens = self._mint(principal)
        await self._store_call(
            "put",
            lambda: self._sessions.put(
                principal.username, tokens.refresh_token, self._config.REFRESH_TOKEN_EXPIRE_SECONDS
            ),
            deadline,
        )
        logger.info("Issued session for %s (refresh jti %s)", principal.username, tokens.refresh.jti)
        return tokens

    async def rotate(self, raw_refresh_token: str, timeout: float | None = None) -> TokenPair:
        deadline = self._deadline(timeout)
        claims = self._verify_refresh(raw_refresh_token)
        principal_id = claims.principal.username

        stored = await self._store_call("get", lambda: self._sessions.get(principal_id), deadline)
        if stored is None:
            raise SessionExpiredOrInvalidError()
        if not _same_token(stored, raw_refresh_token):
            logger.warning(
                "Refresh token reuse detected for %s (presented jti %s)", principal_id, claims.jti
            )
            raise TokenMismatchError()

        if self._config.ATOMIC_ROTATION:
            tokens = self._mint(claims.principal)
            swapped = await self._swap(principal_id, raw_refresh_token, tokens.refresh_token, deadline)
            if not swapped:
                logger.warning("Concurrent rotation lost for %s (jti %s)", principal_id, claims.jti)
                raise TokenMismatchError()
        else:
            await self._store_call("delete", lambda: self._sessions.delete(principal_id), deadline)
            tokens = self._mint(claims.principal)
            await self._store_call(
                "put",
                lambda: self._sessions.put(
                    principal_id, tokens.refresh_token, self._config.REFRESH_TOKEN_EXPIRE_SECONDS
                ),
                deadline,
            )

        logger.info(
            "Rotated refresh token for %s (%s -> %s)", principal_id, claims.jti, tokens.refresh.jti
        )
        return tokens

    async def revoke(self, raw_refresh_token: str, timeout: float | None = None) -> None:
        """Delete the session of the principal named by a valid refresh token.

        Any valid, unexpired refresh token of the principal is accepted unless
        ``REVOKE_REQUIRES_MATCH`` is set, in which case it must be the stored one.
        """
        deadline = self._deadline(timeout)
        claims = self._verify_refresh(raw_refresh_token)
        principal_id = claims.principal.username

        if self._config.REVOKE_REQUIRES_MATCH:
            stored = await self._store_call("get", lambda: self._sessions.get(principal_id), deadline)
            if stored is None:
                raise SessionExpiredOrInvalidError()
            if not _same_token(stored, raw_refresh_token):
                logger.warning(
                    "Revoke with superseded refresh token for %s (jti %s)", principal_id, claims.jti
                )
                raise TokenMismatchError()

        await self._store_call("delete", lambda: self._sessions.delete(principal_id), deadline)
        logger.info("Revoked session for %s (jti %s)", principal_id, claims.jti)

    async def logout(self, raw_refresh_token: str, timeout: float | None = None) -> None:
        await self.revoke(raw_refresh_token, timeout=timeout)

    def verify_access(self, raw_access_token: str) -> TokenClaims:
        """Check an access token without touching the session store."""
        try:
            return self._signer.verify_access(raw_access_token)
        except AuthException as exc:
            logger.debug("Access token rejected: %s", exc.kind.value)
            raise UnauthorizedError(cause=exc.kind) from exc

    def _mint(self, principal: Principal) -> TokenPair:
        return TokenPair(
            access=self._signer.sign_access(principal),
            refresh=self._signer.sign_refresh(principal),
        )

    def _verify_refresh(self, raw_refresh_token: str) -> TokenClaims:
        try:
            return self._signer.verify_refresh(raw_refresh_token)
        except AuthException as exc:
            raise InvalidOrExpiredError(cause=exc.kind) from exc

    async def _swap(
        self, principal_id: str, expected: str, new_value: str, deadline: float | None
    ) -> bool:
        # A compare-and-swap is not idempotent: it may have committed even if the reply was lost.
        try:
            return await self._store_call(
                "compare_and_swap",
                lambda: self._sessions.compare_and_swap(
                    principal_id, expected, new_value, self._config.REFRESH_TOKEN_EXPIRE_SECONDS
                ),
                deadline,
                retry=False,
            )
        except StoreUnavailableError:
            stored = await self._store_call("get", lambda: self._sessions.get(principal_id), deadline)
            if stored is not None and _same_token(stored, new_value):
                logger.info("Compare-and-swap for %s committed despite a store error", principal_id)
                return True
            raise

    def _deadline(self, timeout: float | None) -> float | None:
        if timeout is None:
            return None
        return asyncio.get_running_loop().time() + timeout

    async def _store_call(
        self,
        name: str,
        call: Callable[[], Awaitable[T]],
        deadline: float | None,
        retry: bool = True,
    ) -> T:
        loop = asyncio.get_running_loop()
        attempts = 1 + max(0, self._config.STORE_RETRY_ATTEMPTS) if retry else 1
        last_error: StoreUnavailableError | None = None

        for attempt in range(1, attempts + 1):
            call_timeout = self._config.STORE_TIMEOUT_SECONDS
            if deadline is not None:
                call_timeout = min(call_timeout, deadline - loop.time())
                if call_timeout <= 0:
                    break
            try:
                return await asyncio.wait_for(call(), timeout=call_timeout)
            except asyncio.TimeoutError as exc:
                last_error = StoreUnavailableError(f"Session store {name} timed out")
                last_error.__cause__ = exc
            except StoreUnavailableError as exc:
                last_error = exc
            except OSError as exc:
                last_error = StoreUnavailableError(f"Session store {name} failed: {exc}")
                last_error.__cause__ = exc

            if attempt < attempts:
                logger.warning(
                    "Session store %s failed (attempt %d/%d): %s", name, attempt, attempts, last_error
                )
                await self._sleep(self._config.STORE_RETRY_BACKOFF_SECONDS * attempt)

        if last_error is None:
            last_error = StoreUnavailableError(f"Deadline exceeded before session store {name}")
        raise last_error


def _same_token(stored: str, presented: str) -> bool:
    return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))
