"""
Pickup game schemas
"""

from datetime import date, datetime
from decimal import Decimal
from pydantic import Field
from typing import List, Optional
from uuid import UUID

from sportsbnb.models.game import GameStatus, ParticipantStatus, SkillLevel
from sportsbnb.schemas.base import BaseSchema, IDSchema, TimestampSchema


class GameCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    sport: str = Field(..., min_length=1, max_length=50)
    skill_level: SkillLevel = SkillLevel.ALL
    venue_id: Optional[UUID] = None
    location: str = Field(..., min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    game_date: date
    game_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    duration_hours: int = Field(1, ge=1, le=8)
    max_players: int = Field(..., ge=2, le=100)
    price_per_player: Decimal = Field(Decimal("0"), ge=0)
    is_public: bool = True


class ParticipantResponse(BaseSchema):
    user_id: UUID
    status: ParticipantStatus
    joined_at: datetime
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class GameResponse(IDSchema, TimestampSchema):
    host_id: UUID
    venue_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    sport: str
    skill_level: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    game_date: date
    game_time: str
    duration_hours: int
    max_players: int
    price_per_player: Decimal
    is_public: bool
    status: GameStatus
    current_players: int = 0
    spots_left: int = 0
    distance: Optional[float] = None
    host_name: Optional[str] = None


class GameDetail(GameResponse):
    participants: List[ParticipantResponse] = []


class MyGamesResponse(BaseSchema):
    hosted: List[GameResponse]
    joined: List[GameResponse]


class GameCheckoutResponse(BaseSchema):
    demo: bool = False
    success: bool = True
    url: Optional[str] = None
    sessionId: Optional[str] = None
    gameTitle: Optional[str] = None


class VerifyGamePaymentResponse(BaseSchema):
    success: bool
    gameTitle: str
