"""
Authentication endpoints
"""

from typing import Any
from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from sportsbnb.config import settings
from sportsbnb.core.database import get_session
from sportsbnb.core.exceptions import AuthenticationError, ValidationError
from sportsbnb.core.security import (
    RateLimiter,
    get_current_user,
    security_manager,
)
from sportsbnb.domain.validation import validate_password_change, validate_signup
from sportsbnb.models.profile import Profile
from sportsbnb.models.user import User, UserRole
from sportsbnb.schemas.response import MessageResponse
from sportsbnb.schemas.user import (
    LoginResponse,
    MFAVerifyRequest,
    PasswordChangeRequest,
    SignupRequest,
    Token,
    TokenRefresh,
    TwoFactorCode,
    TwoFactorDisableRequest,
    TwoFactorEnabledResponse,
    TwoFactorSetupResponse,
    UserResponse,
)
from sportsbnb.services.two_factor_service import two_factor_service

logger = logging.getLogger(__name__)

router = APIRouter()

auth_rate_limit = RateLimiter(settings.RATE_LIMIT_AUTH_PER_MINUTE, 60, scope="auth")

INVALID_LOGIN = "Invalid email or password"


def _token_response(user: User) -> dict:
    tokens = security_manager.issue_tokens(user)
    tokens["user"] = UserResponse.model_validate(user)
    return tokens


@router.post("/signup", response_model=Token, status_code=201, dependencies=[Depends(auth_rate_limit)])
async def signup(
    form: SignupRequest,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Create an account and its profile.

    The form is checked before anything touches the database, so a short
    or mismatched password never creates a row.
    """
    data = form.model_dump()
    validate_signup(data).raise_if_any()

    email = data["email"].strip().lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise ValidationError({"email": "An account with this email already exists"})

    role = UserRole.OWNER if data["user_type"] == "owner" else UserRole.PLAYER
    if settings.ADMIN_EMAIL and email == settings.ADMIN_EMAIL.lower():
        role = UserRole.ADMIN

    user = User(
        email=email,
        password_hash=security_manager.hash_password(data["password"]),
        role=role,
        is_active=True,
    )
    user.profile = Profile(
        user_type=data["user_type"],
        full_name=data["full_name"].strip(),
        email=email,
        preferred_currency=settings.DEFAULT_CURRENCY,
        notification_preferences={"email": True, "push": True},
        onboarding_completed=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("User signed up", extra={"user_id": str(user.id), "role": role.value})
    return _token_response(user)


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(auth_rate_limit)])
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    OAuth2 compatible token login. Accounts with two-factor enabled get a
    challenge token to exchange at /mfa/verify instead of tokens.
    """
    result = await db.execute(select(User).where(User.email == form_data.username.strip().lower()))
    user = result.scalar_one_or_none()

    if not user or not security_manager.verify_password(form_data.password, user.password_hash):
        raise AuthenticationError(INVALID_LOGIN)
    if not user.is_active:
        raise AuthenticationError(INVALID_LOGIN)

    if user.two_factor_enabled:
        challenge = await two_factor_service.create_challenge(user)
        return {"mfa_required": True, "challenge_token": challenge}

    return _token_response(user)


@router.post("/mfa/verify", response_model=Token, dependencies=[Depends(auth_rate_limit)])
async def verify_mfa(
    body: MFAVerifyRequest,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Finish a two-factor login with an authenticator or backup code
    """
    user = await two_factor_service.complete_challenge(db, body.challenge_token, body.code.strip())
    return _token_response(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    token_data: TokenRefresh,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Exchange a refresh token for a new token pair; the old one is revoked
    """
    payload = await security_manager.decode_token(token_data.refresh_token, expected_type="refresh")
    result = await db.execute(select(User).where(User.id == security_manager.subject_id(payload)))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError("Invalid refresh token")

    await security_manager.blacklist_token(payload)
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> Any:
    return current_user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> Any:
    """
    Revoke the access token used for this request
    """
    await security_manager.blacklist_token(request.state.token_payload)
    return {"message": "Successfully logged out"}


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    form: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    data = form.model_dump()
    validate_password_change(data).raise_if_any()
    if not security_manager.verify_password(data["current_password"], current_user.password_hash):
        raise ValidationError({"current_password": "Current password is incorrect"})

    current_user.password_hash = security_manager.hash_password(data["new_password"])
    await db.commit()
    return {"message": "Password updated"}


@router.post("/2fa/setup", response_model=TwoFactorSetupResponse)
async def setup_two_factor(
    current_user: User = Depends(get_current_user)
) -> Any:
    """
    Start TOTP enrolment; returns the secret and a QR code to scan
    """
    return await two_factor_service.start_setup(current_user)


@router.post("/2fa/verify-setup", response_model=TwoFactorEnabledResponse)
async def verify_two_factor_setup(
    body: TwoFactorCode,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    backup_codes = await two_factor_service.verify_setup(db, current_user, body.code)
    return {"enabled": True, "backup_codes": backup_codes}


@router.post("/2fa/disable", response_model=TwoFactorEnabledResponse)
async def disable_two_factor(
    body: TwoFactorDisableRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    await two_factor_service.disable(db, current_user, body.password)
    return {"enabled": False}
