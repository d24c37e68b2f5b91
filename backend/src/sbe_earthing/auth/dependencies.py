"""FastAPI dependencies for authentication."""

from fastapi import HTTPException, Request

from sbe_earthing.auth.middleware import get_user_context
from sbe_earthing.auth.types import UserContext

# Stand-in caller when the gate is disabled
LOCAL_ADMIN = UserContext(subject="local", roles=["admin"])


def auth_enabled(request: Request) -> bool:
    return getattr(request.app.state, "jwt_service", None) is not None


def require_authenticated(request: Request) -> UserContext:
    """Dependency that requires a valid bearer token.

    Raises:
        HTTPException 401 if not authenticated
    """
    if not auth_enabled(request):
        return LOCAL_ADMIN

    user_context = get_user_context(request)
    if not user_context:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_context


def require_admin(request: Request) -> UserContext:
    """Dependency that requires an admin token.

    Raises:
        HTTPException 401 if not authenticated
        HTTPException 403 if the token lacks the admin role
    """
    user_context = require_authenticated(request)
    if not user_context.is_admin:
        raise HTTPException(
            status_code=403,
            detail="Insufficient permissions. Required roles: admin",
        )
    return user_context
