"""
Venue review endpoints
"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.security import get_current_user
from sportsbnb.models.user import User
from sportsbnb.schemas.response import MessageResponse
from sportsbnb.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from sportsbnb.services.review_service import review_service
from sportsbnb.services.venue_service import venue_service

router = APIRouter()


@router.get("/venue/{venue_id}", response_model=List[ReviewResponse])
async def list_venue_reviews(
    venue_id: UUID,
    db: AsyncSession = Depends(get_session)
) -> Any:
    await venue_service.get_venue(db, venue_id)
    return await review_service.list_for_venue(db, venue_id)


@router.post("/", response_model=ReviewResponse, status_code=201)
async def create_review(
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Review a venue. One review per user per venue.
    """
    return await review_service.create(db, current_user, review_data.model_dump())


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: UUID,
    updates: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await review_service.update(db, current_user, review_id, updates.model_dump(exclude_unset=True))


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    await review_service.delete(db, current_user, review_id)
    return {"message": "Review deleted"}
