"""Authentication middleware for FastAPI."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from sbe_earthing.auth.jwt_service import JWTError, JWTService
from sbe_earthing.auth.types import UserContext

logger = logging.getLogger(__name__)

PUBLIC_PATHS = ("/api/health", "/docs", "/openapi.json", "/redoc")


class AuthMiddleware(BaseHTTPMiddleware):
    """Extracts a Bearer token and sets request.state.user_context.

    Unauthenticated requests pass through with user_context set to None;
    rejecting them is left to the endpoint dependencies.
    """

    def __init__(self, app, jwt_service: JWTService | None = None):
        super().__init__(app)
        self._jwt_service = jwt_service

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.user_context = None

        # Falls back to the service configured at startup
        jwt_service = self._jwt_service or getattr(request.app.state, "jwt_service", None)
        if jwt_service is None or request.url.path.startswith(PUBLIC_PATHS):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            try:
                claims = jwt_service.decode_token(auth_header[7:])
            except JWTError as e:
                logger.debug("Rejected bearer token: %s", e)
            else:
                if claims.type == "access":
                    request.state.user_context = UserContext(
                        subject=claims.subject,
                        roles=[claims.role] if claims.role else [],
                    )

        return await call_next(request)


def get_user_context(request: Request) -> UserContext | None:
    """Get the user context from the request state, None if anonymous."""
    return getattr(request.state, "user_context", None)
