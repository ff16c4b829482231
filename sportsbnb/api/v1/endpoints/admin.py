"""
Admin management endpoints
"""

import logging
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_or_404, get_session
from sportsbnb.core.exceptions import ValidationError
from sportsbnb.core.security import require_admin
from sportsbnb.models.profile import Profile
from sportsbnb.models.user import User, UserRole
from sportsbnb.models.venue import Venue
from sportsbnb.schemas.admin import (
    AdminUserResponse,
    PlatformStats,
    RoleUpdate,
    UserActivation,
    VenueActivation,
)
from sportsbnb.schemas.venue import VenueResponse
from sportsbnb.services.analytics_service import analytics_service
from sportsbnb.services.venue_service import venue_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _admin_user(user: User, full_name: Optional[str]) -> AdminUserResponse:
    response = AdminUserResponse.model_validate(user)
    response.full_name = full_name
    return response


async def _user_with_name(db: AsyncSession, user_id: UUID) -> AdminUserResponse:
    user = await get_or_404(db, User, user_id, "User")
    result = await db.execute(select(Profile.full_name).where(Profile.user_id == user.id))
    return _admin_user(user, result.scalar_one_or_none())


@router.get("/stats", response_model=PlatformStats)
async def platform_stats(
    admin_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await analytics_service.platform_stats(db)


@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    search: Optional[str] = Query(None, description="Matches email or full name"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    stmt = select(User, Profile.full_name).outerjoin(Profile, Profile.user_id == User.id)
    if role:
        stmt = stmt.where(User.role == role)
    if search:
        term = f"%{search.strip()}%"
        stmt = stmt.where(or_(User.email.ilike(term), Profile.full_name.ilike(term)))
    stmt = stmt.order_by(User.created_at.desc()).offset(skip).limit(limit)

    result = await db.execute(stmt)
    return [_admin_user(user, full_name) for user, full_name in result.all()]


@router.patch("/users/{user_id}/role", response_model=AdminUserResponse)
async def change_role(
    user_id: UUID,
    body: RoleUpdate,
    admin_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Change a user's role. Admins cannot demote themselves.
    """
    user = await get_or_404(db, User, user_id, "User")
    if user.id == admin_user.id and body.role != UserRole.ADMIN:
        raise ValidationError({"role": "You cannot remove your own admin role"})

    user.role = UserRole(body.role)
    await db.commit()
    await db.refresh(user)
    logger.info(
        "User role changed",
        extra={"user_id": str(user.id), "role": user.role.value, "admin_id": str(admin_user.id)}
    )
    return await _user_with_name(db, user.id)


@router.patch("/users/{user_id}/active", response_model=AdminUserResponse)
async def set_user_active(
    user_id: UUID,
    body: UserActivation,
    admin_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    user = await get_or_404(db, User, user_id, "User")
    if user.id == admin_user.id and not body.is_active:
        raise ValidationError({"is_active": "You cannot deactivate your own account"})

    user.is_active = body.is_active
    await db.commit()
    await db.refresh(user)
    logger.info("User activation changed", extra={"user_id": str(user.id), "is_active": user.is_active})
    return await _user_with_name(db, user.id)


@router.get("/venues", response_model=List[VenueResponse])
async def list_all_venues(
    include_inactive: bool = True,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    stmt = select(Venue)
    if not include_inactive:
        stmt = stmt.where(Venue.is_active.is_(True))
    stmt = stmt.order_by(Venue.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return [venue_service.serialize(v) for v in result.scalars().all()]


@router.patch("/venues/{venue_id}/active", response_model=VenueResponse)
async def set_venue_active(
    venue_id: UUID,
    body: VenueActivation,
    admin_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venue = await venue_service.get_venue(db, venue_id)
    venue = await venue_service.set_active(db, venue, body.is_active)
    return venue_service.serialize(venue)
