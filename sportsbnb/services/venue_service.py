"""
Venue listing, management and schedule
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sportsbnb.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from sportsbnb.domain import availability
from sportsbnb.domain.catalog import PRICE_BANDS, in_price_band
from sportsbnb.domain.geo import Coordinate, sort_by_distance
from sportsbnb.domain.pricing import customer_price, format_price
from sportsbnb.domain.wizard import VENUE_CREATION
from sportsbnb.models.booking import Booking, occupies_slot
from sportsbnb.models.user import User
from sportsbnb.models.venue import Venue, VenueHours, BlockedDate
from sportsbnb.schemas.venue import VenueResponse

logger = logging.getLogger(__name__)


class VenueService:
    """Service for venue queries and owner management"""

    @staticmethod
    def serialize(venue: Venue, distance: Optional[float] = None) -> VenueResponse:
        response = VenueResponse.model_validate(venue)
        if distance is not None:
            response.distance = round(distance, 2)
        return response

    @staticmethod
    async def list_venues(
        db: AsyncSession,
        query: Optional[str] = None,
        sport: Optional[str] = None,
        price_band: Optional[str] = None,
        city: Optional[str] = None,
        origin: Optional[Coordinate] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[VenueResponse], int]:
        """
        Active venues matching the filters. With an origin the list is
        ordered nearest first; otherwise best rated first.
        """
        if price_band and price_band not in PRICE_BANDS:
            raise ValidationError({"price_range": f"Unknown price range: {price_band}"})

        stmt = select(Venue).where(Venue.is_active.is_(True))
        if city:
            stmt = stmt.where(Venue.city.ilike(city.strip()))
        if query:
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(or_(
                Venue.name.ilike(pattern),
                Venue.city.ilike(pattern),
                Venue.address.ilike(pattern),
            ))
        stmt = stmt.order_by(Venue.rating.desc(), Venue.name)

        result = await db.execute(stmt)
        venues = list(result.scalars().all())

        # JSON membership and price bands are filtered here to stay portable
        if sport and sport.lower() != "all":
            venues = [v for v in venues if sport in (v.sports or [])]
        if price_band:
            venues = [v for v in venues if in_price_band(v.price_per_hour, price_band)]

        if origin is not None:
            ranked = sort_by_distance(venues, origin, lambda v: (v.latitude, v.longitude))
        else:
            ranked = [(v, None) for v in venues]

        total = len(ranked)
        start = (page - 1) * per_page
        window = ranked[start:start + per_page]
        return [VenueService.serialize(v, d) for v, d in window], total

    @staticmethod
    async def list_cities(db: AsyncSession) -> List[str]:
        result = await db.execute(
            select(Venue.city).where(Venue.is_active.is_(True)).distinct().order_by(Venue.city)
        )
        return [city for city in result.scalars().all() if city]

    @staticmethod
    async def get_venue(db: AsyncSession, venue_id: UUID, with_schedule: bool = False) -> Venue:
        stmt = select(Venue).where(Venue.id == venue_id)
        if with_schedule:
            stmt = stmt.options(selectinload(Venue.hours), selectinload(Venue.blocked_dates))
        result = await db.execute(stmt)
        venue = result.scalar_one_or_none()
        if venue is None:
            raise NotFoundError("Venue", venue_id)
        return venue

    @staticmethod
    async def get_managed_venue(
        db: AsyncSession,
        user: User,
        venue_id: UUID,
        with_schedule: bool = False
    ) -> Venue:
        """A venue the user may manage: their own, or any venue for admins"""
        venue = await VenueService.get_venue(db, venue_id, with_schedule)
        if venue.owner_id != user.id and not user.is_admin:
            raise AuthorizationError("You can only manage your own venues")
        return venue

    @staticmethod
    async def list_owned(db: AsyncSession, owner: User) -> List[Venue]:
        result = await db.execute(
            select(Venue).where(Venue.owner_id == owner.id).order_by(Venue.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_venue(db: AsyncSession, owner: User, data: Dict[str, Any]) -> Venue:
        """Validate the whole venue wizard and create the venue with a default week"""
        VENUE_CREATION.validate_all(data).raise_if_any()

        venue = Venue(
            owner_id=owner.id,
            name=data["name"].strip(),
            description=data.get("description"),
            address=data.get("address"),
            city=data["city"].strip(),
            zip_code=data.get("zip_code"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            location_confirmed=data.get("latitude") is not None,
            image_url=data.get("image_url"),
            sports=list(data.get("sports") or []),
            amenities=list(data.get("amenities") or []),
            price_per_hour=data["price_per_hour"],
            is_indoor=bool(data.get("is_indoor")),
            is_active=True,
        )
        venue.hours = [
            VenueHours(
                day_of_week=day.day_of_week,
                open_time=day.open_time,
                close_time=day.close_time,
                is_closed=day.is_closed,
            )
            for day in availability.default_week()
        ]
        db.add(venue)
        await db.commit()
        await db.refresh(venue)

        logger.info("Venue created", extra={"venue_id": str(venue.id), "owner_id": str(owner.id)})
        return venue

    @staticmethod
    async def update_venue(db: AsyncSession, venue: Venue, updates: Dict[str, Any]) -> Venue:
        merged = {
            "name": venue.name,
            "description": venue.description,
            "city": venue.city,
            "latitude": venue.latitude,
            "longitude": venue.longitude,
            "price_per_hour": venue.price_per_hour,
            "sports": venue.sports,
            "amenities": venue.amenities,
            "image_url": venue.image_url,
        }
        merged.update(updates)
        VENUE_CREATION.validate_all(merged).raise_if_any()

        for field, value in updates.items():
            setattr(venue, field, value)
        await db.commit()
        await db.refresh(venue)
        return venue

    @staticmethod
    async def set_active(db: AsyncSession, venue: Venue, is_active: bool) -> Venue:
        venue.is_active = is_active
        await db.commit()
        await db.refresh(venue)
        logger.info("Venue activation changed", extra={"venue_id": str(venue.id), "is_active": is_active})
        return venue

    # Schedule

    @staticmethod
    async def get_hours(db: AsyncSession, venue_id: UUID) -> List[VenueHours]:
        result = await db.execute(
            select(VenueHours).where(VenueHours.venue_id == venue_id).order_by(VenueHours.day_of_week)
        )
        return list(result.scalars().all())

    @staticmethod
    async def replace_hours(db: AsyncSession, venue: Venue, entries: List[Any]) -> List[VenueHours]:
        """Replace the venue's whole week; every weekday must be listed once"""
        errors = availability.validate_week(entries)
        missing = set(range(7)) - {e.day_of_week for e in entries}
        if missing:
            errors["hours"] = "Provide hours for all seven days"
        if errors:
            raise ValidationError(errors)

        await db.execute(delete(VenueHours).where(VenueHours.venue_id == venue.id))
        for entry in entries:
            db.add(VenueHours(
                venue_id=venue.id,
                day_of_week=entry.day_of_week,
                open_time=availability.normalize_time(entry.open_time),
                close_time=availability.normalize_time(entry.close_time),
                is_closed=entry.is_closed,
            ))
        await db.commit()
        return await VenueService.get_hours(db, venue.id)

    @staticmethod
    async def list_blocked_dates(db: AsyncSession, venue_id: UUID, upcoming_only: bool = False) -> List[BlockedDate]:
        stmt = select(BlockedDate).where(BlockedDate.venue_id == venue_id)
        if upcoming_only:
            stmt = stmt.where(BlockedDate.blocked_date >= date.today())
        result = await db.execute(stmt.order_by(BlockedDate.blocked_date))
        return list(result.scalars().all())

    @staticmethod
    async def add_blocked_date(db: AsyncSession, venue: Venue, blocked_date: date, reason: str = None) -> BlockedDate:
        if blocked_date < date.today():
            raise ValidationError({"blocked_date": "Pick today or a future date"})

        blocked = BlockedDate(venue_id=venue.id, blocked_date=blocked_date, reason=reason)
        db.add(blocked)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("This date is already blocked", details={"blocked_date": blocked_date.isoformat()})
        await db.refresh(blocked)
        return blocked

    @staticmethod
    async def remove_blocked_date(db: AsyncSession, venue: Venue, blocked_id: UUID) -> None:
        result = await db.execute(
            select(BlockedDate).where(BlockedDate.id == blocked_id, BlockedDate.venue_id == venue.id)
        )
        blocked = result.scalar_one_or_none()
        if blocked is None:
            raise NotFoundError("Blocked date", blocked_id)
        await db.delete(blocked)
        await db.commit()

    @staticmethod
    async def booked_times(db: AsyncSession, venue_id: UUID, on: date) -> List[str]:
        result = await db.execute(
            select(Booking.booking_time).where(
                Booking.venue_id == venue_id,
                Booking.booking_date == on,
                occupies_slot(),
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def open_slots(db: AsyncSession, venue: Venue, on: date) -> List[str]:
        """Slots still bookable; ``venue`` must be loaded with its schedule"""
        return availability.available_slots(
            on,
            venue.hours,
            blocked_dates=[b.blocked_date for b in venue.blocked_dates],
            booked_times=await VenueService.booked_times(db, venue.id, on),
            today=date.today(),
        )

    @staticmethod
    async def availability(db: AsyncSession, venue: Venue, on: date) -> Dict[str, Any]:
        day = availability.hours_for(on, venue.hours)
        price = customer_price(venue.price_per_hour)
        slots = await VenueService.open_slots(db, venue, on)
        return {
            "venue_id": venue.id,
            "date": on,
            "day_of_week": availability.day_of_week(on),
            "is_blocked": on in {b.blocked_date for b in venue.blocked_dates},
            "is_closed": bool(day is not None and day.is_closed),
            "slots": [{"time": s, "label": availability.slot_label(s)} for s in slots],
            "price": price,
            "formatted_price": format_price(price),
        }


# Initialize global venue service
venue_service = VenueService()
