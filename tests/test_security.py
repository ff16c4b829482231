"""
Unit tests for security module
"""

import pytest
from datetime import timedelta
from jose import jwt
from starlette.requests import Request

from sportsbnb.config import settings
from sportsbnb.core.exceptions import AuthenticationError, RateLimitError
from sportsbnb.core.security import RateLimiter, security_manager


def _request(host: str = "10.0.0.1") -> Request:
    return Request({"type": "http", "method": "POST", "path": "/", "headers": [], "client": (host, 1234)})


@pytest.mark.unit
class TestPasswordHashing:
    """Test password hashing functionality"""

    def test_hash_password(self):
        hashed = security_manager.hash_password("TestPassword123!")
        assert hashed != "TestPassword123!"
        assert "$2b$" in hashed  # bcrypt hash prefix

    def test_verify_password(self):
        hashed = security_manager.hash_password("TestPassword123!")
        assert security_manager.verify_password("TestPassword123!", hashed) is True
        assert security_manager.verify_password("WrongPassword123!", hashed) is False

    def test_hash_password_uniqueness(self):
        assert security_manager.hash_password("same") != security_manager.hash_password("same")


@pytest.mark.unit
class TestJWTTokens:
    """Test JWT token functionality"""

    def test_access_token_claims(self):
        token = security_manager.create_access_token({"sub": "user-1", "role": "player"})
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        assert payload["sub"] == "user-1"
        assert payload["role"] == "player"
        assert payload["type"] == "access"
        assert payload["jti"]
        assert payload["exp"] > payload["iat"]

    def test_tokens_have_unique_ids(self):
        first = jwt.get_unverified_claims(security_manager.create_access_token({"sub": "u"}))
        second = jwt.get_unverified_claims(security_manager.create_access_token({"sub": "u"}))
        assert first["jti"] != second["jti"]

    @pytest.mark.asyncio
    async def test_decode_valid_token(self):
        token = security_manager.create_access_token({"sub": "user-1"})
        payload = await security_manager.decode_token(token)
        assert payload["sub"] == "user-1"

    @pytest.mark.asyncio
    async def test_decode_rejects_wrong_type(self):
        token = security_manager.create_refresh_token({"sub": "user-1"})
        with pytest.raises(AuthenticationError):
            await security_manager.decode_token(token, expected_type="access")

    @pytest.mark.asyncio
    async def test_decode_rejects_expired_token(self):
        token = security_manager.create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError):
            await security_manager.decode_token(token)

    @pytest.mark.asyncio
    async def test_decode_rejects_foreign_signature(self):
        token = jwt.encode({"sub": "user-1", "type": "access", "jti": "x"}, "another-key", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            await security_manager.decode_token(token)

    @pytest.mark.asyncio
    async def test_blacklisted_token_rejected(self, fake_redis):
        token = security_manager.create_access_token({"sub": "user-1"})
        payload = await security_manager.decode_token(token)
        await security_manager.blacklist_token(payload)

        assert await fake_redis.exists(f"blacklist:{payload['jti']}")
        with pytest.raises(AuthenticationError, match="invalidated"):
            await security_manager.decode_token(token)

    def test_subject_id_requires_uuid(self):
        with pytest.raises(AuthenticationError):
            security_manager.subject_id({"sub": "not-a-uuid"})


@pytest.mark.unit
class TestRateLimiter:
    """Fixed-window limiter on auth endpoints"""

    @pytest.mark.asyncio
    async def test_limit_exceeded(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        limiter = RateLimiter(max_requests=2, window=60, scope="test")

        await limiter(_request())
        await limiter(_request())
        with pytest.raises(RateLimitError):
            await limiter(_request())

    @pytest.mark.asyncio
    async def test_limit_is_per_client(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        limiter = RateLimiter(max_requests=1, window=60, scope="test")

        await limiter(_request("10.0.0.1"))
        await limiter(_request("10.0.0.2"))

    @pytest.mark.asyncio
    async def test_disabled(self):
        limiter = RateLimiter(max_requests=0, window=60, scope="test")
        await limiter(_request())
