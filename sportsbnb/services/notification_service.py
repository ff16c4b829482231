"""
In-app notifications
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.exceptions import NotFoundError
from sportsbnb.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for creating and reading notifications"""

    @staticmethod
    def notify(
        db: AsyncSession,
        user_id: UUID,
        type: str,
        title: str,
        message: str,
        link: str = None
    ) -> Notification:
        """
        Queue a notification on the session; the caller commits it together
        with the change it describes
        """
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            link=link,
            is_read=False
        )
        db.add(notification)
        logger.debug(f"Queued {type} notification for user {user_id}")
        return notification

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
        limit: int = 50
    ) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def unread_count(db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False)
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def mark_read(db: AsyncSession, user_id: UUID, notification_id: UUID) -> Notification:
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification", notification_id)

        notification.is_read = True
        await db.commit()
        await db.refresh(notification)
        return notification

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        await db.commit()
        return result.rowcount or 0


# Initialize global notification service
notification_service = NotificationService()
