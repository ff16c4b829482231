"""
Analytics Service for Dashboards
Player, venue owner and platform-wide figures
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.domain.pricing import format_price, owner_price
from sportsbnb.models.booking import Booking, BookingSource, BookingStatus, PaymentStatus
from sportsbnb.models.game import Game, GameParticipant, GameStatus, occupies_seat
from sportsbnb.models.review import Review
from sportsbnb.models.user import User, UserRole
from sportsbnb.models.venue import Venue
from sportsbnb.services.booking_service import booking_service
from sportsbnb.services.game_service import game_service

logger = logging.getLogger(__name__)


def _owner_share(booking: Booking) -> Decimal:
    # Online payments include the platform fee; manual bookings are all the owner's
    if booking.source == BookingSource.MANUAL:
        return Decimal(booking.total_price)
    return Decimal(owner_price(booking.total_price))


class AnalyticsService:
    """Service for generating dashboard figures"""

    @staticmethod
    async def _count(db: AsyncSession, stmt) -> int:
        result = await db.execute(stmt)
        return result.scalar() or 0

    @staticmethod
    async def player_dashboard(db: AsyncSession, user: User) -> Dict[str, Any]:
        upcoming_bookings = await booking_service.list_for_user(db, user, upcoming_only=True)
        total_bookings = await AnalyticsService._count(
            db, select(func.count(Booking.id)).where(Booking.user_id == user.id)
        )

        result = await db.execute(
            select(Game)
            .join(GameParticipant, GameParticipant.game_id == Game.id)
            .where(
                GameParticipant.user_id == user.id,
                occupies_seat(),
                Game.status == GameStatus.OPEN,
                Game.game_date >= date.today()
            )
            .order_by(Game.game_date, Game.game_time)
        )
        upcoming_games = await game_service.serialize_many(db, list(result.scalars().all()))
        games_joined = await AnalyticsService._count(
            db, select(func.count(GameParticipant.id)).where(GameParticipant.user_id == user.id, occupies_seat())
        )

        return {
            "upcoming_bookings": upcoming_bookings,
            "upcoming_games": upcoming_games,
            "total_bookings": total_bookings,
            "games_joined": games_joined,
        }

    @staticmethod
    async def owner_dashboard(db: AsyncSession, owner: User) -> Dict[str, Any]:
        result = await db.execute(select(Venue).where(Venue.owner_id == owner.id))
        venues: List[Venue] = list(result.scalars().all())
        venue_ids = [v.id for v in venues]

        bookings: List[Booking] = []
        if venue_ids:
            result = await db.execute(
                select(Booking)
                .where(Booking.venue_id.in_(venue_ids))
                .order_by(Booking.booking_date, Booking.booking_time)
            )
            bookings = list(result.scalars().all())

        confirmed = [b for b in bookings if b.status == BookingStatus.CONFIRMED]
        revenue = sum((_owner_share(b) for b in confirmed), Decimal(0))
        rated = [v for v in venues if v.review_count]
        average_rating = (
            round(sum(v.rating * v.review_count for v in rated) / sum(v.review_count for v in rated), 2)
            if rated else None
        )
        today = date.today()

        return {
            "venue_count": len(venues),
            "active_venue_count": sum(1 for v in venues if v.is_active),
            "total_bookings": len(bookings),
            "confirmed_bookings": len(confirmed),
            "cancelled_bookings": sum(1 for b in bookings if b.status == BookingStatus.CANCELLED),
            "revenue": revenue,
            "formatted_revenue": format_price(revenue),
            "average_rating": average_rating,
            "upcoming_bookings": [b for b in confirmed if b.booking_date >= today][:20],
        }

    @staticmethod
    async def platform_stats(db: AsyncSession) -> Dict[str, Any]:
        role_counts = dict(
            (await db.execute(select(User.role, func.count(User.id)).group_by(User.role))).all()
        )

        result = await db.execute(
            select(Booking).where(
                Booking.status == BookingStatus.CONFIRMED,
                Booking.source == BookingSource.ONLINE,
                Booking.payment_status == PaymentStatus.SUCCEEDED
            )
        )
        paid = list(result.scalars().all())
        gross = sum((Decimal(b.total_price) for b in paid), Decimal(0))
        owners_share = sum((_owner_share(b) for b in paid), Decimal(0))

        return {
            "total_users": sum(role_counts.values()),
            "players": role_counts.get(UserRole.PLAYER, 0),
            "owners": role_counts.get(UserRole.OWNER, 0),
            "admins": role_counts.get(UserRole.ADMIN, 0),
            "total_venues": await AnalyticsService._count(db, select(func.count(Venue.id))),
            "active_venues": await AnalyticsService._count(
                db, select(func.count(Venue.id)).where(Venue.is_active.is_(True))
            ),
            "total_bookings": await AnalyticsService._count(db, select(func.count(Booking.id))),
            "confirmed_bookings": await AnalyticsService._count(
                db, select(func.count(Booking.id)).where(Booking.status == BookingStatus.CONFIRMED)
            ),
            "gross_volume": gross,
            "platform_revenue": gross - owners_share,
            "total_games": await AnalyticsService._count(db, select(func.count(Game.id))),
            "open_games": await AnalyticsService._count(
                db, select(func.count(Game.id)).where(Game.status == GameStatus.OPEN)
            ),
            "total_reviews": await AnalyticsService._count(db, select(func.count(Review.id))),
        }


# Initialize global analytics service
analytics_service = AnalyticsService()
