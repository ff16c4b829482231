"""
Venue, schedule and availability schemas
"""

from datetime import date
from decimal import Decimal
from pydantic import Field, computed_field
from typing import List, Optional
from uuid import UUID

from sportsbnb.domain.catalog import venue_image
from sportsbnb.domain.pricing import customer_price, format_price
from sportsbnb.schemas.base import BaseSchema, IDSchema, TimestampSchema


class VenueCreate(BaseSchema):
    """
    Venue creation form. Fields are loose so the form gate can
    report every problem against its field.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    price_per_hour: Optional[Decimal] = None
    sports: List[str] = []
    amenities: List[str] = []
    image_url: Optional[str] = None
    is_indoor: bool = False


class VenueUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    address: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location_confirmed: Optional[bool] = None
    price_per_hour: Optional[Decimal] = Field(None, gt=0)
    sports: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    image_url: Optional[str] = None
    is_indoor: Optional[bool] = None


class VenueResponse(IDSchema, TimestampSchema):
    owner_id: UUID
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    city: str
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_confirmed: bool = False
    image_url: Optional[str] = None
    sports: List[str] = []
    amenities: List[str] = []
    price_per_hour: Decimal
    is_indoor: bool = False
    is_active: bool = True
    rating: float = 0.0
    review_count: int = 0
    distance: Optional[float] = None

    @computed_field
    @property
    def customer_price(self) -> int:
        return customer_price(self.price_per_hour)

    @computed_field
    @property
    def formatted_price(self) -> str:
        return format_price(self.customer_price)

    @computed_field
    @property
    def display_image(self) -> str:
        return venue_image(self.image_url, self.sports)


class VenueHoursEntry(BaseSchema):
    day_of_week: int = Field(..., ge=0, le=6)
    open_time: str = "09:00"
    close_time: str = "22:00"
    is_closed: bool = False


class WeeklyHoursUpdate(BaseSchema):
    hours: List[VenueHoursEntry]


class BlockedDateCreate(BaseSchema):
    blocked_date: date
    reason: Optional[str] = Field(None, max_length=500)


class BlockedDateResponse(IDSchema):
    venue_id: UUID
    blocked_date: date
    reason: Optional[str] = None


class SlotSchema(BaseSchema):
    time: str
    label: str


class AvailabilityResponse(BaseSchema):
    venue_id: UUID
    date: date
    day_of_week: int
    is_blocked: bool
    is_closed: bool
    slots: List[SlotSchema]
    price: int
    formatted_price: str


class CityList(BaseSchema):
    cities: List[str]
