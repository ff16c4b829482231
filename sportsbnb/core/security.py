"""
Security utilities for authentication and authorization
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging
import uuid

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.config import settings
from sportsbnb.core.database import get_session
from sportsbnb.core.exceptions import AuthenticationError, AuthorizationError, RateLimitError
from sportsbnb.core.redis import redis_manager
from sportsbnb.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login",
    auto_error=False
)


class SecurityManager:
    """
    Security manager for authentication and authorization
    """

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def _encode(data: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = data.copy()
        to_encode.update({
            "exp": now + expires_delta,
            "iat": now,
            "type": token_type,
            "jti": uuid.uuid4().hex,
        })
        return jwt.encode(
            to_encode,
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

    @staticmethod
    def create_access_token(
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a JWT access token
        """
        return SecurityManager._encode(
            data,
            "access",
            expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
        )

    @staticmethod
    def create_refresh_token(
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a JWT refresh token
        """
        return SecurityManager._encode(
            data,
            "refresh",
            expires_delta or timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
        )

    @staticmethod
    async def is_token_blacklisted(jti: str) -> bool:
        try:
            return await redis_manager.exists(f"blacklist:{jti}")
        except Exception as e:
            logger.error(f"Error checking token blacklist: {e}")
            return False  # Fail open for availability

    @staticmethod
    async def blacklist_token(payload: Dict[str, Any]) -> None:
        """
        Blacklist a decoded token until it would have expired anyway
        """
        expires_at = datetime.fromtimestamp(payload.get("exp", 0), tz=timezone.utc)
        ttl = max(1, int((expires_at - datetime.now(timezone.utc)).total_seconds()))
        try:
            await redis_manager.set(f"blacklist:{payload['jti']}", "1", ttl=ttl)
        except Exception as e:
            logger.error(f"Error blacklisting token: {e}")

    @staticmethod
    async def decode_token(token: str, expected_type: str = "access") -> Dict[str, Any]:
        """
        Decode and verify a JWT, then check its type and the blacklist
        """
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except JWTError as e:
            logger.info(f"JWT decode error: {e}")
            raise AuthenticationError("Could not validate credentials")

        if payload.get("type") != expected_type:
            raise AuthenticationError(f"Invalid token type. Expected {expected_type}")
        if not payload.get("sub") or not payload.get("jti"):
            raise AuthenticationError("Could not validate credentials")
        if await SecurityManager.is_token_blacklisted(payload["jti"]):
            raise AuthenticationError("Token has been invalidated")
        return payload

    @staticmethod
    def subject_id(payload: Dict[str, Any]) -> uuid.UUID:
        try:
            return uuid.UUID(payload["sub"])
        except (KeyError, ValueError):
            raise AuthenticationError("Could not validate credentials")

    def issue_tokens(self, user: User) -> Dict[str, Any]:
        claims = {"sub": str(user.id), "role": user.role.value}
        return {
            "access_token": self.create_access_token(claims),
            "refresh_token": self.create_refresh_token(claims),
            "token_type": "bearer",
            "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }


# Create global security manager
security_manager = SecurityManager()


async def _load_user(db: AsyncSession, payload: Dict[str, Any]) -> User:
    user_id = security_manager.subject_id(payload)
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is disabled")
    return user


async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the bearer token to an active user
    """
    payload = await security_manager.decode_token(token)
    user = await _load_user(db, payload)
    request.state.user_id = str(user.id)
    request.state.token_payload = payload
    return user


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_session)
) -> Optional[User]:
    """
    Like get_current_user, but anonymous requests resolve to None
    """
    if not token:
        return None
    payload = await security_manager.decode_token(token)
    return await _load_user(db, payload)


async def require_owner(current_user: User = Depends(get_current_user)) -> User:
    """
    Require venue owner (or admin) role for endpoint
    """
    if not current_user.is_owner:
        raise AuthorizationError("Venue owner access required")
    return current_user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Require admin role for endpoint
    """
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user


class RateLimiter:
    """
    Fixed-window rate limiter keyed by client address
    """

    def __init__(self, max_requests: int, window: int = 60, scope: str = "api"):
        self.max_requests = max_requests
        self.window = window
        self.scope = scope

    async def __call__(self, request: Request):
        if not settings.RATE_LIMIT_ENABLED:
            return

        client = request.client.host if request.client else "unknown"
        key = f"{self.scope}:{client}"
        is_limited, _ = await redis_manager.is_rate_limited(key, self.max_requests, self.window)
        if is_limited:
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": self.scope, "client": client}
            )
            raise RateLimitError(self.max_requests, self.window)
