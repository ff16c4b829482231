"""
Venue endpoints: discovery, owner management and schedules
"""

from datetime import date
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.exceptions import NotFoundError, ValidationError
from sportsbnb.core.security import get_optional_user, require_owner
from sportsbnb.domain.geo import Coordinate
from sportsbnb.domain.wizard import VENUE_CREATION, apply_action
from sportsbnb.models.user import User
from sportsbnb.schemas.profile import WizardDefinition, WizardStepRequest, WizardStepResponse
from sportsbnb.schemas.response import MessageResponse, PaginatedResponse, PaginationMeta
from sportsbnb.schemas.venue import (
    AvailabilityResponse,
    BlockedDateCreate,
    BlockedDateResponse,
    CityList,
    VenueCreate,
    VenueHoursEntry,
    VenueResponse,
    VenueUpdate,
    WeeklyHoursUpdate,
)
from sportsbnb.services.storage_service import VENUE_IMAGES, storage_service
from sportsbnb.services.venue_service import venue_service

router = APIRouter()


def _origin(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinate]:
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValidationError({"lat": "Both lat and lng are needed to sort by distance"})
    return Coordinate(lat, lng)


@router.get("/", response_model=PaginatedResponse[VenueResponse])
async def list_venues(
    q: Optional[str] = Query(None, description="Matches name, city or address"),
    sport: Optional[str] = None,
    price_range: Optional[str] = Query(None, description="low, medium or high"),
    city: Optional[str] = None,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Active venues. Passing lat/lng orders results nearest first, with
    venues that have no location at the end.
    """
    venues, total = await venue_service.list_venues(
        db,
        query=q,
        sport=sport,
        price_band=price_range,
        city=city,
        origin=_origin(lat, lng),
        page=page,
        per_page=per_page,
    )
    return {"data": venues, "pagination": PaginationMeta.build(page, per_page, total)}


@router.get("/cities", response_model=CityList)
async def list_cities(db: AsyncSession = Depends(get_session)) -> Any:
    return {"cities": await venue_service.list_cities(db)}


@router.get("/mine", response_model=List[VenueResponse])
async def my_venues(
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venues = await venue_service.list_owned(db, current_user)
    return [venue_service.serialize(v) for v in venues]


@router.get("/wizard", response_model=WizardDefinition)
async def get_venue_wizard() -> Any:
    return VENUE_CREATION.describe()


@router.post("/wizard/step", response_model=WizardStepResponse)
async def venue_wizard_step(
    body: WizardStepRequest,
    current_user: User = Depends(require_owner)
) -> Any:
    state, errors = apply_action(VENUE_CREATION, body.step, body.action, body.data)
    return {**state.snapshot(), "errors": errors}


@router.post("/", response_model=VenueResponse, status_code=201)
async def create_venue(
    venue_data: VenueCreate,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venue = await venue_service.create_venue(db, current_user, venue_data.model_dump())
    return venue_service.serialize(venue)


@router.get("/{venue_id}", response_model=VenueResponse)
async def get_venue(
    venue_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Venue details. Deactivated venues are only visible to their owner
    and admins.
    """
    venue = await venue_service.get_venue(db, venue_id)
    if not venue.is_active:
        can_see = current_user is not None and (current_user.id == venue.owner_id or current_user.is_admin)
        if not can_see:
            raise NotFoundError("Venue", venue_id)
    return venue_service.serialize(venue)


@router.patch("/{venue_id}", response_model=VenueResponse)
async def update_venue(
    venue_id: UUID,
    updates: VenueUpdate,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    venue = await venue_service.update_venue(db, venue, updates.model_dump(exclude_unset=True))
    return venue_service.serialize(venue)


@router.delete("/{venue_id}", response_model=MessageResponse)
async def deactivate_venue(
    venue_id: UUID,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Take a venue off the marketplace; its bookings and reviews are kept
    """
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    await venue_service.set_active(db, venue, False)
    return {"message": "Venue deactivated"}


@router.post("/{venue_id}/image", response_model=VenueResponse)
async def upload_venue_image(
    venue_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    previous = venue.image_url
    stored = await storage_service.upload(VENUE_IMAGES, str(venue.id), file)
    venue = await venue_service.update_venue(db, venue, {"image_url": stored["url"]})
    storage_service.discard_url(VENUE_IMAGES, previous)
    return venue_service.serialize(venue)


# Schedule

@router.get("/{venue_id}/hours", response_model=List[VenueHoursEntry])
async def get_hours(
    venue_id: UUID,
    db: AsyncSession = Depends(get_session)
) -> Any:
    await venue_service.get_venue(db, venue_id)
    return await venue_service.get_hours(db, venue_id)


@router.put("/{venue_id}/hours", response_model=List[VenueHoursEntry])
async def replace_hours(
    venue_id: UUID,
    body: WeeklyHoursUpdate,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Replace the whole weekly schedule (0 = Sunday ... 6 = Saturday)
    """
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    return await venue_service.replace_hours(db, venue, body.hours)


@router.get("/{venue_id}/blocked-dates", response_model=List[BlockedDateResponse])
async def list_blocked_dates(
    venue_id: UUID,
    upcoming: bool = True,
    db: AsyncSession = Depends(get_session)
) -> Any:
    await venue_service.get_venue(db, venue_id)
    return await venue_service.list_blocked_dates(db, venue_id, upcoming_only=upcoming)


@router.post("/{venue_id}/blocked-dates", response_model=BlockedDateResponse, status_code=201)
async def add_blocked_date(
    venue_id: UUID,
    body: BlockedDateCreate,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    return await venue_service.add_blocked_date(db, venue, body.blocked_date, body.reason)


@router.delete("/{venue_id}/blocked-dates/{blocked_id}", response_model=MessageResponse)
async def remove_blocked_date(
    venue_id: UUID,
    blocked_id: UUID,
    current_user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_session)
) -> Any:
    venue = await venue_service.get_managed_venue(db, current_user, venue_id)
    await venue_service.remove_blocked_date(db, venue, blocked_id)
    return {"message": "Date unblocked"}


@router.get("/{venue_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    venue_id: UUID,
    on: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Bookable one-hour slots for a date
    """
    venue = await venue_service.get_venue(db, venue_id, with_schedule=True)
    if not venue.is_active:
        raise NotFoundError("Venue", venue_id)
    return await venue_service.availability(db, venue, on)
