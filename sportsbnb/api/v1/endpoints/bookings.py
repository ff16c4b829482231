"""
Booking endpoints
"""

from datetime import date
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.logging import get_request_logger
from sportsbnb.core.security import get_current_user, require_owner
from sportsbnb.models.booking import BookingStatus
from sportsbnb.models.user import User
from sportsbnb.schemas.booking import (
    BookingCheckout,
    BookingResponse,
    CheckoutResponse,
    ManualBookingCreate,
    RefundRequest,
    RefundResponse,
    VerifyBookingPaymentResponse,
    VerifyPaymentRequest,
)
from sportsbnb.services.booking_service import booking_service
from sportsbnb.services.venue_service import venue_service

router = APIRouter()


def _log(request: Request, user: User):
    return get_request_logger(__name__, getattr(request.state, "request_id", None), str(user.id))


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    request: Request,
    body: BookingCheckout,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Book a one-hour slot. Returns a hosted checkout URL, or the confirmed
    booking when the venue takes payments in demo mode.
    """
    _log(request, current_user).info(
        "Booking checkout requested",
        extra={"venue_id": str(body.venue_id), "booking_date": body.booking_date.isoformat()}
    )
    return await booking_service.create_checkout(
        db, current_user, body.venue_id, body.booking_date, body.booking_time
    )


@router.post("/verify-payment", response_model=VerifyBookingPaymentResponse)
async def verify_booking_payment(
    body: VerifyPaymentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    booking = await booking_service.verify_payment(db, current_user, body.sessionId)
    return {"booking": booking}


@router.post("/refund", response_model=RefundResponse)
async def refund_booking(
    request: Request,
    body: RefundRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Cancel one of your bookings; paid bookings are refunded in full
    """
    message = await booking_service.refund(db, current_user, body.bookingId)
    _log(request, current_user).info("Booking cancelled", extra={"booking_id": str(body.bookingId)})
    return {"success": True, "message": message}


@router.get("/mine", response_model=List[BookingResponse])
async def my_bookings(
    upcoming: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await booking_service.list_for_user(db, current_user, upcoming_only=upcoming)


@router.get("/venue/{venue_id}", response_model=List[BookingResponse])
async def venue_bookings(
    venue_id: UUID,
    on: Optional[date] = None,
    status: Optional[BookingStatus] = None,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Bookings at one of the owner's venues, optionally for a single day
    """
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    return await booking_service.list_for_venue(db, venue.id, on=on, status=status)


@router.post("/manual", response_model=BookingResponse, status_code=201)
async def create_manual_booking(
    body: ManualBookingCreate,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Record a walk-in or phone booking for one of the owner's venues
    """
    return await booking_service.create_manual(db, current_user, body.model_dump())
