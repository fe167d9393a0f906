"""Token value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class Principal:
    """Authenticated entity a token represents. ``username`` is the session key."""

    username: str
    role: str


@dataclass(frozen=True)
class TokenClaims:
    principal: Principal
    jti: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class SignedToken:
    raw: str
    claims: TokenClaims

    @property
    def jti(self) -> str:
        return self.claims.jti

    @property
    def expires_at(self) -> datetime:
        return self.claims.expires_at


@dataclass(frozen=True)
class TokenPair:
    access: SignedToken
    refresh: SignedToken

    @property
    def access_token(self) -> str:
        return self.access.raw

    @property
    def refresh_token(self) -> str:
        return self.refresh.raw

    @property
    def principal(self) -> Principal:
        return self.refresh.claims.principal
