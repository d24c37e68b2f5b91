"""Tests for back-office token handling."""

import pytest

from sbe_earthing.auth import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
    UserContext,
)


SECRET = "test-secret-key-with-at-least-32-chars"


@pytest.fixture
def jwt_service():
    return JWTService(SECRET)


class TestJWTService:
    def test_round_trip(self, jwt_service):
        token = jwt_service.generate_access_token("ops@sbeearthing.com")
        claims = jwt_service.decode_token(token)

        assert claims.subject == "ops@sbeearthing.com"
        assert claims.role == "admin"
        assert claims.type == "access"
        assert claims.exp - claims.iat == JWTService.ACCESS_TOKEN_TTL

    def test_custom_role_and_ttl(self, jwt_service):
        claims = jwt_service.decode_token(
            jwt_service.generate_access_token("viewer", role="viewer", ttl=60)
        )
        assert claims.role == "viewer"
        assert claims.exp - claims.iat == 60

    def test_expired_token(self, jwt_service):
        token = jwt_service.generate_access_token("ops", ttl=-10)
        with pytest.raises(TokenExpiredError):
            jwt_service.decode_token(token)

    def test_wrong_secret(self, jwt_service):
        token = JWTService("another-secret-key-with-32-characters").generate_access_token("ops")
        with pytest.raises(InvalidTokenError):
            jwt_service.decode_token(token)

    def test_garbage(self, jwt_service):
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            jwt_service.decode_token("not-a-jwt")

    def test_errors_share_base_class(self):
        assert issubclass(TokenExpiredError, JWTError)
        assert issubclass(InvalidTokenError, JWTError)


class TestUserContext:
    def test_admin_role(self):
        assert UserContext(subject="ops", roles=["admin"]).is_admin
        assert not UserContext(subject="ops", roles=["viewer"]).is_admin
        assert not UserContext(subject="ops").is_admin
