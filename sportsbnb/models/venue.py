"""
Venue, weekly hours and blocked-date models
"""

from sqlalchemy import (
    Column, String, Integer, Text, Boolean, Float, Numeric, Date,
    ForeignKey, JSON, Uuid, UniqueConstraint
)
from sqlalchemy.orm import relationship

from sportsbnb.models.base import BaseModel


class Venue(BaseModel):
    """
    Bookable sports facility listed by an owner
    """
    __tablename__ = "venues"

    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    address = Column(Text)
    city = Column(String(100), nullable=False, index=True)
    zip_code = Column(String(20))
    latitude = Column(Float)
    longitude = Column(Float)
    location_confirmed = Column(Boolean, default=False, nullable=False)
    image_url = Column(Text)
    sports = Column(JSON, default=list, nullable=False)
    amenities = Column(JSON, default=list, nullable=False)
    price_per_hour = Column(Numeric(10, 2), nullable=False)
    is_indoor = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    rating = Column(Float, default=0.0, nullable=False)
    review_count = Column(Integer, default=0, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="venues")
    hours = relationship(
        "VenueHours",
        back_populates="venue",
        cascade="all, delete-orphan",
        order_by="VenueHours.day_of_week"
    )
    blocked_dates = relationship(
        "BlockedDate",
        back_populates="venue",
        cascade="all, delete-orphan",
        order_by="BlockedDate.blocked_date"
    )
    bookings = relationship("Booking", back_populates="venue", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="venue", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Venue(id={self.id}, name={self.name}, city={self.city}, price={self.price_per_hour})>"


class VenueHours(BaseModel):
    """
    Operating hours for one weekday (0 = Sunday ... 6 = Saturday)
    """
    __tablename__ = "venue_hours"
    __table_args__ = (
        UniqueConstraint("venue_id", "day_of_week", name="uq_venue_hours_day"),
    )

    venue_id = Column(Uuid(as_uuid=True), ForeignKey("venues.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    open_time = Column(String(5), nullable=False, default="09:00")
    close_time = Column(String(5), nullable=False, default="22:00")
    is_closed = Column(Boolean, default=False, nullable=False)

    venue = relationship("Venue", back_populates="hours")

    def __repr__(self):
        return f"<VenueHours(venue_id={self.venue_id}, day={self.day_of_week}, closed={self.is_closed})>"


class BlockedDate(BaseModel):
    """
    Single calendar date on which a venue takes no bookings
    """
    __tablename__ = "blocked_dates"
    __table_args__ = (
        UniqueConstraint("venue_id", "blocked_date", name="uq_blocked_dates_day"),
    )

    venue_id = Column(Uuid(as_uuid=True), ForeignKey("venues.id"), nullable=False, index=True)
    blocked_date = Column(Date, nullable=False)
    reason = Column(Text)

    venue = relationship("Venue", back_populates="blocked_dates")

    def __repr__(self):
        return f"<BlockedDate(venue_id={self.venue_id}, date={self.blocked_date})>"
