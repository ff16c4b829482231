"""
In-app notification endpoints
"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.security import get_current_user
from sportsbnb.models.user import User
from sportsbnb.schemas.notification import NotificationResponse, UnreadCount
from sportsbnb.schemas.response import MessageResponse
from sportsbnb.services.notification_service import notification_service

router = APIRouter()


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    unread: bool = False,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await notification_service.list_for_user(db, current_user.id, unread_only=unread, limit=limit)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return {"unread": await notification_service.unread_count(db, current_user.id)}


@router.post("/read-all", response_model=MessageResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    updated = await notification_service.mark_all_read(db, current_user.id)
    return {"message": f"Marked {updated} notifications as read"}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await notification_service.mark_read(db, current_user.id, notification_id)
