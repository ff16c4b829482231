"""
Profile and onboarding endpoints
"""

from typing import Any
from uuid import UUID
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.security import get_current_user
from sportsbnb.domain.wizard import apply_action
from sportsbnb.models.user import User
from sportsbnb.schemas.profile import (
    ProfileResponse,
    ProfileUpdate,
    PublicProfileResponse,
    WizardDefinition,
    WizardStepRequest,
    WizardStepResponse,
    WizardSubmit,
)
from sportsbnb.services.profile_service import profile_service
from sportsbnb.services.storage_service import AVATARS, storage_service

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await profile_service.get_for_user(db, current_user.id)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    updates: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Update the signed-in user's profile; omitted fields keep their values
    """
    profile = await profile_service.get_for_user(db, current_user.id)
    return await profile_service.update(db, profile, updates.model_dump(exclude_unset=True))


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Upload a profile photo to the avatars bucket
    """
    stored = await storage_service.upload(AVATARS, str(current_user.id), file)
    profile = await profile_service.get_for_user(db, current_user.id)
    previous = profile.avatar_url
    profile = await profile_service.set_avatar(db, profile, stored["url"])
    storage_service.discard_url(AVATARS, previous)
    return profile


@router.get("/onboarding/{kind}", response_model=WizardDefinition)
async def get_onboarding_steps(kind: str) -> Any:
    return profile_service.onboarding_wizard(kind).describe()


@router.post("/onboarding/{kind}/step", response_model=WizardStepResponse)
async def onboarding_step(
    kind: str,
    body: WizardStepRequest,
    current_user: User = Depends(get_current_user)
) -> Any:
    """
    Validate one onboarding step and report where the wizard moves next.
    Field errors keep the wizard on the current step.
    """
    wizard = profile_service.onboarding_wizard(kind)
    state, errors = apply_action(wizard, body.step, body.action, body.data)
    return {**state.snapshot(), "errors": errors}


@router.post("/onboarding/{kind}/complete", response_model=ProfileResponse)
async def complete_onboarding(
    kind: str,
    body: WizardSubmit,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await profile_service.complete_onboarding(db, current_user, kind, body.data)


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_public_profile(
    user_id: UUID,
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await profile_service.get_for_user(db, user_id)
