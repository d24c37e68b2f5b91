"""Type definitions for authentication."""

from dataclasses import dataclass, field


@dataclass
class TokenClaims:
    """Claims embedded in a JWT token.

    Attributes:
        subject: Who the token was issued to (operator name or email)
        role: Back-office role
        exp: Token expiration timestamp
        iat: Token issued-at timestamp
        type: Token type (always "access")
    """

    subject: str
    role: str | None = None
    exp: int = 0
    iat: int = 0
    type: str = "access"


@dataclass
class UserContext:
    """The authenticated caller, as seen by endpoint dependencies."""

    subject: str
    roles: list[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles
