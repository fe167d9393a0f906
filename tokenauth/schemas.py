"""Auth request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from tokenauth.models import Principal, TokenClaims


class MessageResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=128)
    role: str = Field(default="user", min_length=1, max_length=64)

    def to_principal(self) -> Principal:
        return Principal(username=self.username, role=self.role)


class TokenResponse(BaseModel):
    token: str


class ClaimsResponse(BaseModel):
    username: str
    role: str
    jti: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "ClaimsResponse":
        return cls(
            username=claims.principal.username,
            role=claims.principal.role,
            jti=claims.jti,
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
        )
