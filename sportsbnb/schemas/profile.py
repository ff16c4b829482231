"""
Profile and onboarding schemas
"""

from datetime import date
from pydantic import Field
from typing import Any, Dict, List, Optional
from uuid import UUID

from sportsbnb.schemas.base import BaseSchema, TimestampSchema


class ProfileUpdate(BaseSchema):
    """Partial profile update; omitted fields are left untouched"""
    full_name: Optional[str] = Field(None, max_length=255)
    username: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    preferred_sports: Optional[List[str]] = None
    skill_level: Optional[str] = None
    business_name: Optional[str] = Field(None, max_length=255)
    preferred_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    notification_preferences: Optional[Dict[str, bool]] = None


class ProfileResponse(TimestampSchema):
    user_id: UUID
    user_type: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    city: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    preferred_sports: Optional[List[str]] = None
    skill_level: Optional[str] = None
    business_name: Optional[str] = None
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None
    venue_description: Optional[str] = None
    sports_offered: Optional[List[str]] = None
    preferred_currency: Optional[str] = None
    notification_preferences: Optional[Dict[str, bool]] = None
    onboarding_completed: bool = False


class PublicProfileResponse(BaseSchema):
    user_id: UUID
    user_type: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    city: Optional[str] = None
    preferred_sports: Optional[List[str]] = None
    skill_level: Optional[str] = None


class WizardStepSchema(BaseSchema):
    key: str
    title: str
    fields: List[str]
    optional: bool


class WizardDefinition(BaseSchema):
    name: str
    total_steps: int
    steps: List[WizardStepSchema]


class WizardStepRequest(BaseSchema):
    """
    One step of a wizard. ``data`` carries everything entered so far;
    ``action`` is next, back or skip.
    """
    step: int = Field(..., ge=1)
    action: str = Field("next", pattern="^(next|back|skip)$")
    data: Dict[str, Any] = {}


class WizardStepResponse(BaseSchema):
    wizard: str
    current_step: int
    total_steps: int
    progress: int
    completed: bool
    step: WizardStepSchema
    errors: Dict[str, str] = {}


class WizardSubmit(BaseSchema):
    data: Dict[str, Any]
