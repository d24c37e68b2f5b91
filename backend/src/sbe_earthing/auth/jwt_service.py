"""JWT token generation and validation service."""

import time

import jwt

from sbe_earthing.auth.types import TokenClaims


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid or malformed."""

    pass


class JWTService:
    """Issues and verifies back-office access tokens.

    Uses HS256 algorithm with a shared secret key. Tokens are minted by
    the operator CLI and presented as Bearer tokens to admin endpoints.
    """

    ACCESS_TOKEN_TTL = 8 * 60 * 60  # one working day

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self._secret_key = secret_key
        self._algorithm = algorithm

    def generate_access_token(
        self,
        subject: str,
        role: str = "admin",
        ttl: int | None = None,
    ) -> str:
        """Generate a signed access token.

        Args:
            subject: Operator the token is issued to
            role: Role claim (default "admin")
            ttl: Lifetime in seconds (default ACCESS_TOKEN_TTL)

        Returns:
            Encoded JWT string
        """
        now = int(time.time())
        claims = {
            "sub": subject,
            "role": role,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.ACCESS_TOKEN_TTL),
            "type": "access",
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        return TokenClaims(
            subject=payload.get("sub", ""),
            role=payload.get("role"),
            exp=payload.get("exp", 0),
            iat=payload.get("iat", 0),
            type=payload.get("type", "access"),
        )
