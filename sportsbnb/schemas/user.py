"""
User and authentication schemas
"""

from pydantic import Field
from typing import List, Optional

from sportsbnb.models.user import UserRole
from sportsbnb.schemas.base import BaseSchema, IDSchema, TimestampSchema


class SignupRequest(BaseSchema):
    """
    Signup form; fields are checked by the form gate so every problem is
    reported next to its field in one response
    """
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    full_name: Optional[str] = None
    user_type: str = "player"

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "player@sportsbnb.am",
                "password": "goal-keeper-9",
                "confirm_password": "goal-keeper-9",
                "full_name": "Ani Petrosyan",
                "user_type": "player"
            }
        }
    }


class PasswordChangeRequest(BaseSchema):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


class UserResponse(IDSchema, TimestampSchema):
    """User response schema"""
    email: str
    role: UserRole
    is_active: bool
    two_factor_enabled: bool = False


class Token(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class LoginResponse(BaseSchema):
    """
    Tokens, or an MFA challenge when the account has two-factor enabled
    """
    mfa_required: bool = False
    challenge_token: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: Optional[UserResponse] = None


class TokenRefresh(BaseSchema):
    refresh_token: str


class MFAVerifyRequest(BaseSchema):
    challenge_token: str
    code: str = Field(..., min_length=6, max_length=9)


class TwoFactorSetupResponse(BaseSchema):
    secret: str
    qr_code: str
    provisioning_uri: str
    manual_entry_setup: str


class TwoFactorCode(BaseSchema):
    code: str = Field(..., min_length=6, max_length=6)


class TwoFactorEnabledResponse(BaseSchema):
    enabled: bool
    backup_codes: List[str] = []


class TwoFactorDisableRequest(BaseSchema):
    password: str
