"""
Access-token / rotating refresh-token authentication core.

Signs short-lived access tokens, tracks one refresh token per principal in a
session store, and rotates or revokes it.
"""

from tokenauth.config import AuthConfig
from tokenauth.models import Principal, SignedToken, TokenClaims, TokenPair
from tokenauth.security import TokenSigner
from tokenauth.services.token_service import TokenLifecycleManager

__all__ = [
    "AuthConfig",
    "Principal",
    "SignedToken",
    "TokenClaims",
    "TokenLifecycleManager",
    "TokenPair",
    "TokenSigner",
]
