"""
Notification schemas
"""

from typing import Optional
from uuid import UUID

from sportsbnb.schemas.base import BaseSchema, IDSchema, TimestampSchema


class NotificationResponse(IDSchema, TimestampSchema):
    user_id: UUID
    type: str
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool


class UnreadCount(BaseSchema):
    unread: int
