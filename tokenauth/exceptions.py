"""Auth exceptions."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    INVALID_OR_EXPIRED = "invalid_or_expired"
    SESSION_EXPIRED_OR_INVALID = "session_expired_or_invalid"
    TOKEN_MISMATCH = "token_mismatch"
    STORE_UNAVAILABLE = "store_unavailable"
    UNAUTHORIZED = "unauthorized"
    CONFIGURATION = "configuration"


class AuthException(Exception):
    """Base auth exception with HTTP status and error kind."""

    kind: ErrorKind = ErrorKind.UNAUTHORIZED
    default_message = "Authentication failed"
    default_status = 401
    retryable = False

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        cause: ErrorKind | None = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status
        self.cause = cause


class MalformedTokenError(AuthException):
    kind = ErrorKind.MALFORMED
    default_message = "Malformed token"


class SignatureInvalidError(AuthException):
    kind = ErrorKind.SIGNATURE_INVALID
    default_message = "Invalid token signature"


class TokenExpiredError(AuthException):
    kind = ErrorKind.EXPIRED
    default_message = "Token expired"


class InvalidOrExpiredError(AuthException):
    """Presented refresh token failed signature, structure or expiry checks.

    ``cause`` carries the signer's specific kind.
    """

    kind = ErrorKind.INVALID_OR_EXPIRED
    default_message = "Invalid or expired refresh token"
    default_status = 403


class SessionExpiredOrInvalidError(AuthException):
    kind = ErrorKind.SESSION_EXPIRED_OR_INVALID
    default_message = "Refresh token expired or invalid"
    default_status = 403


class TokenMismatchError(AuthException):
    """A superseded refresh token was presented; possible token theft."""

    kind = ErrorKind.TOKEN_MISMATCH
    default_message = "Token mismatch"
    default_status = 403


class StoreUnavailableError(AuthException):
    kind = ErrorKind.STORE_UNAVAILABLE
    default_message = "Session store unavailable"
    default_status = 503
    retryable = True


class UnauthorizedError(AuthException):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class ConfigurationError(AuthException):
    kind = ErrorKind.CONFIGURATION
    default_message = "Invalid auth configuration"
    default_status = 500
