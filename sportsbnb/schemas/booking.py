"""
Booking and payment schemas
"""

from pydantic import Field, EmailStr
from typing import Optional
from uuid import UUID
from datetime import date, datetime
from decimal import Decimal

from sportsbnb.models.booking import BookingStatus, BookingSource, PaymentStatus
from sportsbnb.schemas.base import BaseSchema, IDSchema, TimestampSchema


class BookingCheckout(BaseSchema):
    """Booking creation schema"""
    venue_id: UUID
    booking_date: date
    booking_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")


class ManualBookingCreate(BaseSchema):
    """Walk-in or phone booking entered by the venue owner"""
    venue_id: UUID
    booking_date: date
    booking_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=20)
    total_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class BookingResponse(IDSchema, TimestampSchema):
    user_id: Optional[UUID] = None
    venue_id: UUID
    venue_name: str
    booking_date: date
    booking_time: str
    duration_hours: int
    total_price: Decimal
    status: BookingStatus
    payment_status: PaymentStatus
    source: BookingSource
    payment_intent_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None


class CheckoutResponse(BaseSchema):
    """
    Either a hosted checkout to redirect to, or an immediately
    confirmed demo booking
    """
    demo: bool = False
    url: Optional[str] = None
    sessionId: Optional[str] = None
    booking: Optional[BookingResponse] = None
    message: Optional[str] = None


class VerifyPaymentRequest(BaseSchema):
    sessionId: str = Field(..., min_length=1)


class VerifyBookingPaymentResponse(BaseSchema):
    booking: BookingResponse


class RefundRequest(BaseSchema):
    bookingId: UUID


class RefundResponse(BaseSchema):
    success: bool
    message: str
