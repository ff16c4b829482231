"""
Profiles and onboarding
"""

import logging
from datetime import date
from typing import Any, Dict
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.exceptions import NotFoundError, ValidationError
from sportsbnb.domain.catalog import SKILL_LEVELS, SPORT_TYPES
from sportsbnb.domain.pricing import CURRENCIES
from sportsbnb.domain.validation import FormErrors, USERNAME_PATTERN
from sportsbnb.domain.wizard import OWNER_ONBOARDING, PLAYER_ONBOARDING, Wizard
from sportsbnb.models.profile import Profile
from sportsbnb.models.user import User, UserRole

logger = logging.getLogger(__name__)

ONBOARDING_WIZARDS: Dict[str, Wizard] = {
    "player": PLAYER_ONBOARDING,
    "owner": OWNER_ONBOARDING,
}

PLAYER_FIELDS = ("username", "date_of_birth", "gender", "city", "preferred_sports", "skill_level", "avatar_url")
OWNER_FIELDS = ("business_name", "phone", "venue_name", "venue_address", "venue_description", "sports_offered")


class ProfileService:
    """Service for profile reads, edits and onboarding"""

    @staticmethod
    def onboarding_wizard(kind: str) -> Wizard:
        try:
            return ONBOARDING_WIZARDS[kind]
        except KeyError:
            raise NotFoundError("Onboarding flow", kind)

    @staticmethod
    async def get_for_user(db: AsyncSession, user_id: UUID) -> Profile:
        result = await db.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile", user_id)
        return profile

    @staticmethod
    async def _username_taken(db: AsyncSession, username: str, user_id: UUID) -> bool:
        result = await db.execute(
            select(Profile.id).where(Profile.username == username, Profile.user_id != user_id)
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def update(db: AsyncSession, profile: Profile, updates: Dict[str, Any]) -> Profile:
        errors = FormErrors()
        username = updates.get("username")
        if username is not None:
            username = username.strip()
            if errors.check(bool(USERNAME_PATTERN.match(username)), "username",
                            "Usernames are 3-30 letters, digits, dots or underscores"):
                errors.check(not await ProfileService._username_taken(db, username, profile.user_id),
                             "username", "This username is taken")
            updates["username"] = username
        if updates.get("skill_level") is not None:
            errors.check(updates["skill_level"] in SKILL_LEVELS, "skill_level", "Choose a valid skill level")
        if updates.get("preferred_sports") is not None:
            unknown = [s for s in updates["preferred_sports"] if s not in SPORT_TYPES]
            errors.check(not unknown, "preferred_sports", f"Unknown sport: {', '.join(unknown)}")
        if updates.get("preferred_currency") is not None:
            updates["preferred_currency"] = updates["preferred_currency"].upper()
            errors.check(updates["preferred_currency"] in CURRENCIES, "preferred_currency",
                         "Choose a supported currency")
        errors.raise_if_any()

        for field, value in updates.items():
            setattr(profile, field, value)
        await db.commit()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def set_avatar(db: AsyncSession, profile: Profile, url: str) -> Profile:
        profile.avatar_url = url
        await db.commit()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def complete_onboarding(db: AsyncSession, user: User, kind: str, data: Dict[str, Any]) -> Profile:
        """
        Revalidate every wizard step and write the collected answers.
        Finishing owner onboarding upgrades a player account to owner.
        """
        wizard = ProfileService.onboarding_wizard(kind)
        errors = wizard.validate_all(data)

        values: Dict[str, Any] = {}
        fields = PLAYER_FIELDS if kind == "player" else OWNER_FIELDS
        for field in fields:
            if data.get(field) not in (None, ""):
                values[field] = data[field].strip() if isinstance(data[field], str) else data[field]

        if "date_of_birth" in values:
            try:
                values["date_of_birth"] = date.fromisoformat(str(values["date_of_birth"]))
            except ValueError:
                errors.add("date_of_birth", "Enter a valid date")
        if "username" in values and "username" not in errors:
            if await ProfileService._username_taken(db, values["username"], user.id):
                errors.add("username", "This username is taken")
        errors.raise_if_any()

        profile = await ProfileService.get_for_user(db, user.id)
        for field, value in values.items():
            setattr(profile, field, value)
        profile.onboarding_completed = True
        if kind == "owner":
            profile.user_type = "owner"
            if user.role == UserRole.PLAYER:
                user.role = UserRole.OWNER

        await db.commit()
        await db.refresh(profile)
        logger.info("Onboarding completed", extra={"user_id": str(user.id), "kind": kind})
        return profile


# Initialize global profile service
profile_service = ProfileService()
