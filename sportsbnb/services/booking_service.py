"""
Venue booking lifecycle: checkout, payment verification, refunds and
owner-entered bookings
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.config import settings
from sportsbnb.core.exceptions import (
    AuthorizationError,
    BookingError,
    ConflictError,
    NotFoundError,
    SlotUnavailableError,
    ValidationError,
)
from sportsbnb.core.metrics import record_booking
from sportsbnb.core.redis import redis_manager
from sportsbnb.domain.availability import normalize_time
from sportsbnb.domain.pricing import customer_price, platform_fee
from sportsbnb.models.base import utcnow
from sportsbnb.models.booking import Booking, BookingSource, BookingStatus, PaymentStatus, occupies_slot
from sportsbnb.models.profile import Profile
from sportsbnb.models.user import User
from sportsbnb.models.venue import Venue
from sportsbnb.services.notification_service import notification_service
from sportsbnb.services.payment_service import payment_service
from sportsbnb.services.venue_service import venue_service

logger = logging.getLogger(__name__)


def _display_date(on: date) -> str:
    return on.strftime("%a, %b %d").replace(" 0", " ")


def _slot_lock(venue_id: UUID, on: date, slot: str) -> str:
    return f"slot:{venue_id}:{on.isoformat()}:{slot}"


class BookingService:
    """Service for booking operations"""

    @staticmethod
    def _slot(booking_time: str) -> str:
        try:
            return normalize_time(booking_time)
        except ValueError:
            raise ValidationError({"booking_time": "Pick a time slot"})

    @staticmethod
    async def _ensure_open(db: AsyncSession, venue: Venue, on: date, slot: str) -> None:
        if slot not in await venue_service.open_slots(db, venue, on):
            raise SlotUnavailableError(on.isoformat(), slot)

    @staticmethod
    async def _release_own_holds(db: AsyncSession, user: User, venue_id: UUID, on: date, slot: str) -> None:
        """
        Drop the user's unpaid checkouts for this slot so they can start over.
        Their Stripe sessions are closed first so the old link can't be paid.
        """
        result = await db.execute(
            select(Booking).where(
                Booking.user_id == user.id,
                Booking.venue_id == venue_id,
                Booking.booking_date == on,
                Booking.booking_time == slot,
                Booking.status == BookingStatus.PENDING,
            )
        )
        for hold in result.scalars().all():
            if hold.checkout_session_id and not payment_service.close_unpaid_session(hold.checkout_session_id):
                raise ConflictError(
                    "A payment for this slot is already in progress",
                    details={"session_id": hold.checkout_session_id}
                )
            hold.status = BookingStatus.CANCELLED
            hold.cancellation_reason = "Checkout restarted"
        await db.flush()

    @staticmethod
    async def _slot_taken_by_other(db: AsyncSession, booking: Booking) -> bool:
        result = await db.execute(
            select(func.count(Booking.id)).where(
                Booking.venue_id == booking.venue_id,
                Booking.booking_date == booking.booking_date,
                Booking.booking_time == booking.booking_time,
                Booking.id != booking.id,
                occupies_slot(),
            )
        )
        return result.scalar_one() > 0

    @staticmethod
    def _notify_confirmed(db: AsyncSession, booking: Booking, demo: bool = False) -> None:
        title = "Demo Booking Confirmed!" if demo else "Booking Confirmed!"
        notification_service.notify(
            db,
            booking.user_id,
            "booking",
            title,
            f"Your booking at {booking.venue_name} on {_display_date(booking.booking_date)} "
            f"at {booking.booking_time} has been confirmed.",
            link="/dashboard"
        )

    @staticmethod
    async def create_checkout(
        db: AsyncSession,
        user: User,
        venue_id: UUID,
        booking_date: date,
        booking_time: str
    ) -> Dict[str, Any]:
        """
        Hold the slot and start payment.

        Owners without a connected payout account (or a server without a
        Stripe key) get the booking confirmed straight away in demo mode.
        Otherwise the slot is held for BOOKING_EXPIRATION_MINUTES while the
        player pays.
        """
        venue = await venue_service.get_venue(db, venue_id, with_schedule=True)
        if not venue.is_active:
            raise BookingError("This venue is not taking bookings", code="VENUE_INACTIVE")

        slot = BookingService._slot(booking_time)
        async with redis_manager.lock(_slot_lock(venue.id, booking_date, slot)):
            await BookingService._release_own_holds(db, user, venue.id, booking_date, slot)
            await BookingService._ensure_open(db, venue, booking_date, slot)

            price = customer_price(venue.price_per_hour)
            result = await db.execute(select(Profile).where(Profile.user_id == venue.owner_id))
            owner_profile = result.scalar_one_or_none()

            booking = Booking(
                user_id=user.id,
                venue_id=venue.id,
                venue_name=venue.name,
                booking_date=booking_date,
                booking_time=slot,
                duration_hours=1,
                total_price=price,
                source=BookingSource.ONLINE,
            )

            if not payment_service.owner_can_receive(owner_profile):
                booking.status = BookingStatus.CONFIRMED
                booking.payment_status = PaymentStatus.SUCCEEDED
                booking.payment_intent_id = payment_service.demo_reference()
                db.add(booking)
                await db.flush()
                BookingService._notify_confirmed(db, booking, demo=True)
                await db.commit()
                await db.refresh(booking)

                record_booking("confirmed")
                logger.info("Demo booking confirmed", extra={"booking_id": str(booking.id), "venue_id": str(venue.id)})
                return {"demo": True, "booking": booking, "message": "Demo booking created successfully"}

            expires_at = utcnow() + timedelta(minutes=settings.BOOKING_EXPIRATION_MINUTES)
            session = payment_service.create_checkout_session(
                amount=price,
                name=f"Venue Booking: {venue.name}",
                description=f"{_display_date(booking_date)} at {slot} - {venue.address or venue.city}",
                success_path="/booking-success",
                cancel_path=f"/venue/{venue.id}",
                customer_email=user.email,
                metadata={
                    "user_id": str(user.id),
                    "venue_id": str(venue.id),
                    "booking_date": booking_date.isoformat(),
                    "booking_time": slot,
                },
                destination_account=owner_profile.stripe_account_id,
                application_fee=platform_fee(venue.price_per_hour),
                expires_at=expires_at,
            )
            booking.status = BookingStatus.PENDING
            booking.payment_status = PaymentStatus.PENDING
            booking.checkout_session_id = session["id"]
            booking.expires_at = expires_at
            db.add(booking)
            await db.commit()

        record_booking("checkout")
        logger.info("Booking checkout started", extra={"booking_id": str(booking.id), "session_id": session["id"]})
        return {"url": session["url"], "sessionId": session["id"]}

    @staticmethod
    async def verify_payment(db: AsyncSession, user: User, session_id: str) -> Booking:
        """
        Confirm the booking held by a completed checkout session.

        A hold that lapsed still confirms while its slot is free. If someone
        else has booked the slot since, the booking is cancelled and any
        payment refunded.
        """
        result = await db.execute(
            select(Booking).where(
                Booking.checkout_session_id == session_id,
                Booking.user_id == user.id
            )
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError("Booking")

        async with redis_manager.lock(_slot_lock(booking.venue_id, booking.booking_date, booking.booking_time)):
            await db.refresh(booking)
            if booking.status == BookingStatus.CONFIRMED:
                return booking
            if booking.status == BookingStatus.CANCELLED:
                raise BookingError("This booking was cancelled", code="BOOKING_CANCELLED")

            if booking.hold_expired and await BookingService._slot_taken_by_other(db, booking):
                refunded = payment_service.refund_session(session_id)
                booking.status = BookingStatus.CANCELLED
                if refunded:
                    booking.payment_status = PaymentStatus.REFUNDED
                booking.cancellation_reason = "Checkout expired"
                await db.commit()

                record_booking("expired")
                logger.info("Expired booking hold lost its slot", extra={"booking_id": str(booking.id), "refunded": refunded})
                raise BookingError(
                    "Your checkout expired and the slot was booked by someone else",
                    code="BOOKING_EXPIRED",
                    details={"refunded": refunded}
                )

            paid = payment_service.retrieve_paid_session(session_id)
            booking.status = BookingStatus.CONFIRMED
            booking.payment_status = PaymentStatus.SUCCEEDED
            booking.payment_intent_id = paid["payment_intent"]
            booking.expires_at = None
            BookingService._notify_confirmed(db, booking)
            await db.commit()
            await db.refresh(booking)

        record_booking("confirmed")
        logger.info("Booking payment verified", extra={"booking_id": str(booking.id)})
        return booking

    @staticmethod
    async def refund(db: AsyncSession, user: User, booking_id: UUID) -> str:
        """Cancel the user's booking, refunding real payments through Stripe"""
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        if booking.user_id != user.id:
            raise AuthorizationError("You can only cancel your own bookings")
        if booking.status == BookingStatus.CANCELLED:
            raise BookingError("This booking is already cancelled", code="ALREADY_CANCELLED")

        refunded = False
        if (
            settings.stripe_enabled
            and booking.payment_intent_id
            and not payment_service.is_demo_reference(booking.payment_intent_id)
        ):
            payment_service.refund(booking.payment_intent_id)
            refunded = True

        booking.status = BookingStatus.CANCELLED
        if booking.payment_status == PaymentStatus.SUCCEEDED:
            booking.payment_status = PaymentStatus.REFUNDED
        booking.cancellation_reason = "User requested cancellation"

        venue = await db.get(Venue, booking.venue_id)
        if venue is not None:
            notification_service.notify(
                db,
                venue.owner_id,
                "booking",
                "Booking Cancelled",
                f"The booking at {booking.venue_name} on {_display_date(booking.booking_date)} "
                f"at {booking.booking_time} was cancelled.",
                link="/owner/bookings"
            )
        await db.commit()

        record_booking("refunded" if refunded else "cancelled")
        logger.info("Booking cancelled", extra={"booking_id": str(booking.id), "refunded": refunded})
        return "Booking cancelled and refunded" if refunded else "Booking cancelled"

    @staticmethod
    async def create_manual(db: AsyncSession, owner: User, data: Dict[str, Any]) -> Booking:
        """
        Record a walk-in or phone booking. Payment is collected by the
        owner, so the booking is confirmed with its payment left pending.
        """
        venue = await venue_service.get_managed_venue(db, owner, data["venue_id"], with_schedule=True)
        slot = BookingService._slot(data["booking_time"])
        total_price = data.get("total_price")
        async with redis_manager.lock(_slot_lock(venue.id, data["booking_date"], slot)):
            await BookingService._ensure_open(db, venue, data["booking_date"], slot)
            booking = Booking(
                user_id=None,
                venue_id=venue.id,
                venue_name=venue.name,
                booking_date=data["booking_date"],
                booking_time=slot,
                duration_hours=1,
                total_price=venue.price_per_hour if total_price is None else total_price,
                status=BookingStatus.CONFIRMED,
                payment_status=PaymentStatus.PENDING,
                source=BookingSource.MANUAL,
                created_by_owner_id=owner.id,
                customer_name=data["customer_name"].strip(),
                customer_email=data.get("customer_email"),
                customer_phone=data.get("customer_phone"),
                notes=data.get("notes"),
            )
            db.add(booking)
            await db.commit()
            await db.refresh(booking)

        record_booking("manual")
        logger.info("Manual booking created", extra={"booking_id": str(booking.id), "venue_id": str(venue.id)})
        return booking

    @staticmethod
    async def list_for_user(db: AsyncSession, user: User, upcoming_only: bool = False) -> List[Booking]:
        stmt = select(Booking).where(Booking.user_id == user.id)
        if upcoming_only:
            stmt = stmt.where(
                Booking.booking_date >= date.today(),
                Booking.status == BookingStatus.CONFIRMED
            ).order_by(Booking.booking_date, Booking.booking_time)
        else:
            stmt = stmt.order_by(Booking.booking_date.desc(), Booking.booking_time.desc())
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_for_venue(
        db: AsyncSession,
        venue_id: UUID,
        on: Optional[date] = None,
        status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        stmt = select(Booking).where(Booking.venue_id == venue_id)
        if on is not None:
            stmt = stmt.where(Booking.booking_date == on)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        result = await db.execute(stmt.order_by(Booking.booking_date, Booking.booking_time))
        return list(result.scalars().all())


# Initialize global booking service
booking_service = BookingService()
