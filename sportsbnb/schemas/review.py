"""
Review schemas
"""

from pydantic import Field
from typing import Optional
from uuid import UUID

from sportsbnb.schemas.base import BaseSchema, IDSchema, TimestampSchema


class ReviewCreate(BaseSchema):
    venue_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)
    booking_id: Optional[UUID] = None


class ReviewUpdate(BaseSchema):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(IDSchema, TimestampSchema):
    venue_id: UUID
    user_id: UUID
    booking_id: Optional[UUID] = None
    rating: int
    comment: Optional[str] = None
    reviewer_name: Optional[str] = None
    reviewer_avatar: Optional[str] = None
