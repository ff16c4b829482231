"""
Booking model
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Enum, Numeric, Date, DateTime, Uuid, and_, or_
from sqlalchemy.orm import relationship
import enum

from sportsbnb.models.base import BaseModel, is_past, utcnow


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


class BookingSource(str, enum.Enum):
    ONLINE = "online"
    MANUAL = "manual"


class Booking(BaseModel):
    """
    Reservation of a one-hour venue slot tied to a payment
    """
    __tablename__ = "bookings"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    venue_id = Column(Uuid(as_uuid=True), ForeignKey("venues.id"), nullable=False, index=True)
    venue_name = Column(String(255), nullable=False)
    booking_date = Column(Date, nullable=False, index=True)
    booking_time = Column(String(5), nullable=False)
    duration_hours = Column(Integer, default=1, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(BookingStatus),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_status = Column(
        Enum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False
    )
    source = Column(
        Enum(BookingSource),
        default=BookingSource.ONLINE,
        nullable=False
    )
    checkout_session_id = Column(String(255), unique=True)
    payment_intent_id = Column(String(255))  # Payment gateway reference
    expires_at = Column(DateTime(timezone=True))  # End of an unpaid checkout hold
    cancellation_reason = Column(Text)

    # Walk-in / phone bookings entered by the owner
    created_by_owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    customer_name = Column(String(255))
    customer_email = Column(String(255))
    customer_phone = Column(String(20))
    notes = Column(Text)

    # Relationships
    venue = relationship("Venue", back_populates="bookings")
    user = relationship("User", foreign_keys=[user_id])

    @property
    def hold_expired(self) -> bool:
        return self.status == BookingStatus.PENDING and is_past(self.expires_at)

    def __repr__(self):
        return (
            f"<Booking(id={self.id}, venue={self.venue_name}, date={self.booking_date}, "
            f"time={self.booking_time}, status={self.status})>"
        )


def occupies_slot(now=None):
    """Filter for bookings that take their slot: confirmed ones and live checkout holds"""
    now = now or utcnow()
    return or_(
        Booking.status == BookingStatus.CONFIRMED,
        and_(Booking.status == BookingStatus.PENDING, Booking.expires_at > now),
    )
