"""
Venue reviews and rating aggregation
"""

import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from sportsbnb.models.profile import Profile
from sportsbnb.models.review import Review
from sportsbnb.models.user import User
from sportsbnb.models.venue import Venue
from sportsbnb.schemas.review import ReviewResponse
from sportsbnb.services.notification_service import notification_service

logger = logging.getLogger(__name__)


class ReviewService:
    """Service for review operations"""

    @staticmethod
    async def recompute_rating(db: AsyncSession, venue_id: UUID) -> None:
        """Refresh the venue's average rating and review count from its reviews"""
        result = await db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(Review.venue_id == venue_id)
        )
        average, count = result.one()
        venue = await db.get(Venue, venue_id)
        venue.rating = round(float(average), 2) if count else 0.0
        venue.review_count = count

    @staticmethod
    async def list_for_venue(db: AsyncSession, venue_id: UUID) -> List[ReviewResponse]:
        result = await db.execute(
            select(Review, Profile)
            .outerjoin(Profile, Profile.user_id == Review.user_id)
            .where(Review.venue_id == venue_id)
            .order_by(Review.created_at.desc())
        )
        reviews = []
        for review, profile in result.all():
            response = ReviewResponse.model_validate(review)
            if profile is not None:
                response.reviewer_name = profile.full_name
                response.reviewer_avatar = profile.avatar_url
            reviews.append(response)
        return reviews

    @staticmethod
    async def create(db: AsyncSession, user: User, data: Dict[str, Any]) -> Review:
        venue = await db.get(Venue, data["venue_id"])
        if venue is None:
            raise NotFoundError("Venue", data["venue_id"])
        if venue.owner_id == user.id:
            raise AuthorizationError("You cannot review your own venue")

        existing = await db.execute(
            select(Review.id).where(Review.venue_id == venue.id, Review.user_id == user.id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("You have already reviewed this venue")

        review = Review(
            venue_id=venue.id,
            user_id=user.id,
            booking_id=data.get("booking_id"),
            rating=data["rating"],
            comment=data.get("comment"),
        )
        db.add(review)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("You have already reviewed this venue")

        await ReviewService.recompute_rating(db, venue.id)
        notification_service.notify(
            db,
            venue.owner_id,
            "review",
            "New review",
            f"{venue.name} received a {review.rating}-star review.",
            link=f"/venue/{venue.id}"
        )
        await db.commit()
        await db.refresh(review)
        logger.info("Review created", extra={"venue_id": str(venue.id), "rating": review.rating})
        return review

    @staticmethod
    async def _own_review(db: AsyncSession, user: User, review_id: UUID) -> Review:
        review = await db.get(Review, review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        if review.user_id != user.id and not user.is_admin:
            raise AuthorizationError("You can only change your own reviews")
        return review

    @staticmethod
    async def update(db: AsyncSession, user: User, review_id: UUID, updates: Dict[str, Any]) -> Review:
        review = await ReviewService._own_review(db, user, review_id)
        for field, value in updates.items():
            setattr(review, field, value)
        await db.flush()
        await ReviewService.recompute_rating(db, review.venue_id)
        await db.commit()
        await db.refresh(review)
        return review

    @staticmethod
    async def delete(db: AsyncSession, user: User, review_id: UUID) -> None:
        review = await ReviewService._own_review(db, user, review_id)
        venue_id = review.venue_id
        await db.delete(review)
        await db.flush()
        await ReviewService.recompute_rating(db, venue_id)
        await db.commit()


# Initialize global review service
review_service = ReviewService()
