"""JWT signing and verification for access and refresh tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from tokenauth.config import AuthConfig
from tokenauth.exceptions import MalformedTokenError, SignatureInvalidError, TokenExpiredError
from tokenauth.models import Principal, SignedToken, TokenClaims, TokenType

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenSigner:
    """Signs and verifies tokens against two independent keys.

    Holds no state beyond the immutable configuration, so one instance can be
    shared by every concurrent request.
    """

    def __init__(self, config: AuthConfig, clock: Callable[[], datetime] | None = None) -> None:
        self._config = config
        self._clock = clock or _utcnow

    def sign_access(self, principal: Principal) -> SignedToken:
        return self._sign(
            principal,
            TokenType.ACCESS,
            self._config.ACCESS_KEY,
            self._config.ACCESS_TOKEN_EXPIRE_SECONDS,
        )

    def sign_refresh(self, principal: Principal) -> SignedToken:
        return self._sign(
            principal,
            TokenType.REFRESH,
            self._config.REFRESH_KEY,
            self._config.REFRESH_TOKEN_EXPIRE_SECONDS,
        )

    def verify_access(self, raw_token: str) -> TokenClaims:
        return self.verify(raw_token, self._config.ACCESS_KEY, TokenType.ACCESS)

    def verify_refresh(self, raw_token: str) -> TokenClaims:
        return self.verify(raw_token, self._config.REFRESH_KEY, TokenType.REFRESH)

    def verify(self, raw_token: str, key: str, token_type: TokenType) -> TokenClaims:
        """Verify ``raw_token`` against ``key`` and return its claims.

        Raises MalformedTokenError, SignatureInvalidError or TokenExpiredError.
        """
        if not isinstance(raw_token, str) or not raw_token:
            raise MalformedTokenError("Token missing")
        try:
            jwt.get_unverified_header(raw_token)
            jwt.get_unverified_claims(raw_token)
        except JWTError as exc:
            raise MalformedTokenError() from exc

        try:
            payload = jwt.decode(
                raw_token,
                key,
                algorithms=[self._config.JWT_ALGORITHM],
                audience=self._config.JWT_AUDIENCE,
                issuer=self._config.JWT_ISSUER,
                options={"verify_aud": self._config.JWT_AUDIENCE is not None},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except JWTClaimsError as exc:
            raise MalformedTokenError(f"Invalid token claims: {exc}") from exc
        except JWTError as exc:
            raise SignatureInvalidError() from exc

        return self._claims_from_payload(payload, token_type)

    def _sign(self, principal: Principal, token_type: TokenType, key: str, lifetime: int) -> SignedToken:
        # JWT timestamps have one-second resolution
        now = self._clock().replace(microsecond=0)
        expire = now + timedelta(seconds=lifetime)
        jti = uuid4().hex
        payload: dict[str, Any] = {
            "sub": principal.username,
            "role": principal.role,
            "type": token_type.value,
            "exp": expire,
            "iat": now,
            "jti": jti,
        }
        if self._config.JWT_ISSUER:
            payload["iss"] = self._config.JWT_ISSUER
        if self._config.JWT_AUDIENCE:
            payload["aud"] = self._config.JWT_AUDIENCE
        token = jwt.encode(payload, key, algorithm=self._config.JWT_ALGORITHM)
        claims = TokenClaims(
            principal=principal,
            jti=jti,
            token_type=token_type,
            issued_at=now,
            expires_at=expire,
        )
        return SignedToken(raw=token, claims=claims)

    @staticmethod
    def _claims_from_payload(payload: dict[str, Any], token_type: TokenType) -> TokenClaims:
        if payload.get("type") != token_type.value:
            raise MalformedTokenError(f"Invalid {token_type.value} token")
        username = payload.get("sub")
        jti = payload.get("jti")
        if not username or not jti:
            raise MalformedTokenError("Invalid token payload")
        try:
            issued_at = datetime.fromtimestamp(int(payload["iat"]), timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), timezone.utc)
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
            raise MalformedTokenError("Invalid token timestamps") from exc
        return TokenClaims(
            principal=Principal(username=username, role=str(payload.get("role", ""))),
            jti=jti,
            token_type=token_type,
            issued_at=issued_at,
            expires_at=expires_at,
        )
