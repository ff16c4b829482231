"""
Venue review model
"""

from sqlalchemy import Column, Integer, Text, ForeignKey, Uuid, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from sportsbnb.models.base import BaseModel


class Review(BaseModel):
    """
    One rating per user per venue
    """
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("venue_id", "user_id", name="uq_review_user_venue"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    venue_id = Column(Uuid(as_uuid=True), ForeignKey("venues.id"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)

    venue = relationship("Venue", back_populates="reviews")
    user = relationship("User")

    def __repr__(self):
        return f"<Review(venue_id={self.venue_id}, user_id={self.user_id}, rating={self.rating})>"
