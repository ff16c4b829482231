"""
Two-Factor Authentication Service
Handles TOTP enrolment, login challenges and backup codes
"""

import base64
import logging
import secrets
import uuid
from io import BytesIO
from typing import Dict, List

import pyotp
import qrcode
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.config import settings
from sportsbnb.core.exceptions import AuthenticationError, ValidationError
from sportsbnb.core.redis import redis_manager
from sportsbnb.core.security import security_manager
from sportsbnb.models.user import User

logger = logging.getLogger(__name__)


class TwoFactorService:
    """Service for handling two-factor authentication"""

    @staticmethod
    def _setup_key(user: User) -> str:
        return f"2fa_setup:{user.id}"

    @staticmethod
    def _challenge_key(token: str) -> str:
        return f"mfa_challenge:{token}"

    @staticmethod
    def _qr_code_data_uri(uri: str) -> str:
        qr = qrcode.QRCode(version=1, box_size=10, border=5)
        qr.add_data(uri)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format="PNG")
        return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode()}"

    @staticmethod
    async def start_setup(user: User) -> Dict[str, str]:
        """
        Generate a TOTP secret and keep it pending until the user proves
        their authenticator app produces matching codes
        """
        if user.two_factor_enabled:
            raise ValidationError({"code": "Two-factor authentication is already enabled"})

        secret = pyotp.random_base32()
        uri = pyotp.TOTP(secret).provisioning_uri(
            name=user.email,
            issuer_name=settings.TOTP_ISSUER
        )
        await redis_manager.set(
            TwoFactorService._setup_key(user),
            secret,
            ttl=settings.TOTP_SETUP_TTL_SECONDS
        )
        return {
            "secret": secret,
            "qr_code": TwoFactorService._qr_code_data_uri(uri),
            "provisioning_uri": uri,
            "manual_entry_setup": f"{settings.TOTP_ISSUER} ({user.email})",
        }

    @staticmethod
    async def verify_setup(db: AsyncSession, user: User, code: str) -> List[str]:
        """Enable 2FA once the first code checks out; returns fresh backup codes"""
        secret = await redis_manager.get(TwoFactorService._setup_key(user))
        if not secret:
            raise ValidationError({"code": "Setup session expired, start again"})

        if not pyotp.TOTP(secret).verify(code, valid_window=1):
            raise ValidationError({"code": "Invalid verification code"})

        backup_codes = TwoFactorService._generate_backup_codes(settings.BACKUP_CODE_COUNT)
        user.totp_secret = secret
        user.two_factor_enabled = True
        user.backup_codes = ",".join(backup_codes)
        await db.commit()

        await redis_manager.delete(TwoFactorService._setup_key(user))
        logger.info("Two-factor authentication enabled", extra={"user_id": str(user.id)})
        return backup_codes

    @staticmethod
    async def disable(db: AsyncSession, user: User, password: str) -> None:
        if not security_manager.verify_password(password, user.password_hash):
            raise ValidationError({"password": "Incorrect password"})

        user.two_factor_enabled = False
        user.totp_secret = None
        user.backup_codes = None
        await db.commit()
        logger.info("Two-factor authentication disabled", extra={"user_id": str(user.id)})

    @staticmethod
    def verify_totp(user: User, code: str) -> bool:
        if not user.totp_secret:
            return False
        return pyotp.TOTP(user.totp_secret).verify(code, valid_window=1)

    @staticmethod
    def consume_backup_code(user: User, code: str) -> bool:
        """Strike a backup code from the user's list; the caller commits"""
        if not user.backup_codes:
            return False
        codes = user.backup_codes.split(",")
        if code not in codes:
            return False
        codes.remove(code)
        user.backup_codes = ",".join(codes) if codes else None
        return True

    @staticmethod
    async def create_challenge(user: User) -> str:
        """Issue a short-lived token standing in for a half-finished login"""
        token = secrets.token_urlsafe(32)
        await redis_manager.set(
            TwoFactorService._challenge_key(token),
            str(user.id),
            ttl=settings.MFA_CHALLENGE_TTL_SECONDS
        )
        return token

    @staticmethod
    async def complete_challenge(db: AsyncSession, challenge_token: str, code: str) -> User:
        """Resolve a login challenge with a TOTP or backup code"""
        key = TwoFactorService._challenge_key(challenge_token)
        user_id = await redis_manager.get(key)
        if not user_id:
            raise AuthenticationError("Verification expired, please sign in again")

        result = await db.execute(select(User).where(User.id == uuid.UUID(user_id)))
        user = result.scalar_one_or_none()
        if user is None or not user.is_active:
            raise AuthenticationError("Verification expired, please sign in again")

        if not TwoFactorService.verify_totp(user, code):
            if not TwoFactorService.consume_backup_code(user, code):
                raise AuthenticationError("Invalid verification code")
            await db.commit()

        await redis_manager.delete(key)
        return user

    @staticmethod
    def _generate_backup_codes(count: int = 10) -> List[str]:
        codes = []
        for _ in range(count):
            code = "".join(str(secrets.randbelow(10)) for _ in range(8))
            codes.append(f"{code[:4]}-{code[4:]}")
        return codes


# Initialize global 2FA service
two_factor_service = TwoFactorService()
