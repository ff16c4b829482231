"""
Dashboard and admin schemas
"""

from decimal import Decimal
from pydantic import Field
from typing import List, Optional

from sportsbnb.models.user import UserRole
from sportsbnb.schemas.base import BaseSchema
from sportsbnb.schemas.booking import BookingResponse
from sportsbnb.schemas.game import GameResponse
from sportsbnb.schemas.user import UserResponse


class PlayerDashboard(BaseSchema):
    upcoming_bookings: List[BookingResponse]
    upcoming_games: List[GameResponse]
    total_bookings: int
    games_joined: int


class OwnerDashboard(BaseSchema):
    venue_count: int
    active_venue_count: int
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    revenue: Decimal = Field(..., description="Owner share of confirmed booking payments")
    formatted_revenue: str
    average_rating: Optional[float] = None
    upcoming_bookings: List[BookingResponse]


class PlatformStats(BaseSchema):
    total_users: int
    players: int
    owners: int
    admins: int
    total_venues: int
    active_venues: int
    total_bookings: int
    confirmed_bookings: int
    gross_volume: Decimal
    platform_revenue: Decimal
    total_games: int
    open_games: int
    total_reviews: int


class AdminUserResponse(UserResponse):
    full_name: Optional[str] = None


class RoleUpdate(BaseSchema):
    role: UserRole


class VenueActivation(BaseSchema):
    is_active: bool


class UserActivation(BaseSchema):
    is_active: bool
