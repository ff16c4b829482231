"""
Player and owner dashboards
"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.security import get_current_user, require_owner
from sportsbnb.models.user import User
from sportsbnb.schemas.admin import OwnerDashboard, PlayerDashboard
from sportsbnb.services.analytics_service import analytics_service

router = APIRouter()


@router.get("/player", response_model=PlayerDashboard)
async def player_dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await analytics_service.player_dashboard(db, current_user)


@router.get("/owner", response_model=OwnerDashboard)
async def owner_dashboard(
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Totals across the owner's venues. Revenue is the owner's share after
    the platform fee.
    """
    return await analytics_service.owner_dashboard(db, current_user)
