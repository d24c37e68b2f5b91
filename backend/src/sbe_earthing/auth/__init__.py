"""Back-office authentication - JWT bearer tokens."""

from sbe_earthing.auth.dependencies import require_admin, require_authenticated
from sbe_earthing.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)
from sbe_earthing.auth.middleware import AuthMiddleware, get_user_context
from sbe_earthing.auth.types import TokenClaims, UserContext

__all__ = [
    "AuthMiddleware",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "TokenClaims",
    "TokenExpiredError",
    "UserContext",
    "get_user_context",
    "require_admin",
    "require_authenticated",
]
