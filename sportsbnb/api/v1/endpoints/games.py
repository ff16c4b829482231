"""
Pickup game endpoints
"""

from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sportsbnb.core.database import get_session
from sportsbnb.core.exceptions import ValidationError
from sportsbnb.core.security import get_current_user
from sportsbnb.domain.geo import Coordinate
from sportsbnb.models.user import User
from sportsbnb.schemas.booking import VerifyPaymentRequest
from sportsbnb.schemas.game import (
    GameCheckoutResponse,
    GameCreate,
    GameDetail,
    GameResponse,
    MyGamesResponse,
    VerifyGamePaymentResponse,
)
from sportsbnb.schemas.response import MessageResponse
from sportsbnb.services.game_service import game_service

router = APIRouter()


@router.get("/", response_model=List[GameResponse])
async def list_games(
    sport: Optional[str] = None,
    skill_level: Optional[str] = None,
    search: Optional[str] = None,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Upcoming open public games
    """
    if (lat is None) != (lng is None):
        raise ValidationError({"lat": "Both lat and lng are needed to sort by distance"})
    origin = Coordinate(lat, lng) if lat is not None else None
    return await game_service.list_games(db, sport, skill_level, search, origin)


@router.get("/mine", response_model=MyGamesResponse)
async def my_games(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await game_service.my_games(db, current_user)


@router.post("/verify-payment", response_model=VerifyGamePaymentResponse)
async def verify_game_payment(
    body: VerifyPaymentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await game_service.verify_payment(db, current_user, body.sessionId)


@router.post("/", response_model=GameResponse, status_code=201)
async def create_game(
    game_data: GameCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    game = await game_service.create_game(db, current_user, game_data.model_dump())
    return game_service.serialize(game, 0)


@router.get("/{game_id}", response_model=GameDetail)
async def get_game(
    game_id: UUID,
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await game_service.detail(db, game_id)


@router.post("/{game_id}/join", response_model=GameDetail)
async def join_game(
    game_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    await game_service.join(db, current_user, game_id)
    return await game_service.detail(db, game_id)


@router.post("/{game_id}/leave", response_model=MessageResponse)
async def leave_game(
    game_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    await game_service.leave(db, current_user, game_id)
    return {"message": "You left the game"}


@router.post("/{game_id}/cancel", response_model=GameResponse)
async def cancel_game(
    game_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Cancel a game you host; every participant is notified
    """
    game = await game_service.cancel(db, current_user, game_id)
    serialized = await game_service.serialize_many(db, [game])
    return serialized[0]


@router.post("/{game_id}/checkout", response_model=GameCheckoutResponse)
async def create_game_checkout(
    game_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Pay for a seat in a paid game
    """
    return await game_service.create_checkout(db, current_user, game_id)
