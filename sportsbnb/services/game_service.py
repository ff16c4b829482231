"""
Pickup games: listing, hosting, joining and paid participation
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sportsbnb.config import settings
from sportsbnb.core.exceptions import (
    AuthorizationError,
    BookingError,
    ConflictError,
    GameFullError,
    NotFoundError,
    ValidationError,
)
from sportsbnb.core.metrics import record_game_join
from sportsbnb.core.redis import redis_manager
from sportsbnb.domain.availability import normalize_time
from sportsbnb.domain.catalog import SPORT_TYPES
from sportsbnb.domain.geo import Coordinate, sort_by_distance
from sportsbnb.models.base import utcnow
from sportsbnb.models.game import Game, GameParticipant, GameStatus, ParticipantStatus, occupies_seat
from sportsbnb.models.profile import Profile
from sportsbnb.models.user import User
from sportsbnb.models.venue import Venue
from sportsbnb.schemas.game import GameDetail, GameResponse, ParticipantResponse
from sportsbnb.services.notification_service import notification_service
from sportsbnb.services.payment_service import payment_service

logger = logging.getLogger(__name__)


class GameService:
    """Service for pickup game operations"""

    @staticmethod
    async def _participant_counts(db: AsyncSession, game_ids: Iterable[UUID]) -> Dict[UUID, int]:
        game_ids = list(game_ids)
        if not game_ids:
            return {}
        result = await db.execute(
            select(GameParticipant.game_id, func.count(GameParticipant.id))
            .where(GameParticipant.game_id.in_(game_ids), occupies_seat())
            .group_by(GameParticipant.game_id)
        )
        return {game_id: count for game_id, count in result.all()}

    @staticmethod
    async def _profiles(db: AsyncSession, user_ids: Iterable[UUID]) -> Dict[UUID, Profile]:
        user_ids = list(set(user_ids))
        if not user_ids:
            return {}
        result = await db.execute(select(Profile).where(Profile.user_id.in_(user_ids)))
        return {p.user_id: p for p in result.scalars().all()}

    @staticmethod
    def serialize(
        game: Game,
        players: int,
        host: Optional[Profile] = None,
        distance: Optional[float] = None
    ) -> GameResponse:
        response = GameResponse.model_validate(game)
        response.current_players = players
        response.spots_left = max(game.max_players - players, 0)
        response.host_name = host.full_name if host else None
        if distance is not None:
            response.distance = round(distance, 2)
        return response

    @staticmethod
    async def serialize_many(db: AsyncSession, games: List[Game]) -> List[GameResponse]:
        counts = await GameService._participant_counts(db, [g.id for g in games])
        hosts = await GameService._profiles(db, [g.host_id for g in games])
        return [GameService.serialize(g, counts.get(g.id, 0), hosts.get(g.host_id)) for g in games]

    @staticmethod
    async def list_games(
        db: AsyncSession,
        sport: Optional[str] = None,
        skill_level: Optional[str] = None,
        search: Optional[str] = None,
        origin: Optional[Coordinate] = None,
    ) -> List[GameResponse]:
        """Open public games from today on, soonest first or nearest first"""
        stmt = select(Game).where(
            Game.status == GameStatus.OPEN,
            Game.is_public.is_(True),
            Game.game_date >= date.today(),
        )
        if sport and sport.lower() != "all":
            stmt = stmt.where(Game.sport == sport)
        if skill_level and skill_level != "all":
            stmt = stmt.where(Game.skill_level == skill_level)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(Game.title.ilike(pattern), Game.location.ilike(pattern)))
        stmt = stmt.order_by(Game.game_date, Game.game_time)

        result = await db.execute(stmt)
        games = list(result.scalars().all())
        counts = await GameService._participant_counts(db, [g.id for g in games])
        hosts = await GameService._profiles(db, [g.host_id for g in games])

        if origin is not None:
            ranked = sort_by_distance(games, origin, lambda g: (g.latitude, g.longitude))
        else:
            ranked = [(g, None) for g in games]
        return [
            GameService.serialize(g, counts.get(g.id, 0), hosts.get(g.host_id), d)
            for g, d in ranked
        ]

    @staticmethod
    async def get_game(db: AsyncSession, game_id: UUID, with_participants: bool = False) -> Game:
        stmt = select(Game).where(Game.id == game_id)
        if with_participants:
            stmt = stmt.options(selectinload(Game.participants))
        result = await db.execute(stmt)
        game = result.scalar_one_or_none()
        if game is None:
            raise NotFoundError("Game", game_id)
        return game

    @staticmethod
    async def detail(db: AsyncSession, game_id: UUID) -> GameDetail:
        game = await GameService.get_game(db, game_id, with_participants=True)
        profiles = await GameService._profiles(
            db, [game.host_id] + [p.user_id for p in game.participants]
        )
        seated = [p for p in game.participants if p.holds_seat]
        base = GameService.serialize(game, len(seated), profiles.get(game.host_id))
        participants = []
        for participant in sorted(seated, key=lambda p: p.joined_at):
            profile = profiles.get(participant.user_id)
            participants.append(ParticipantResponse(
                user_id=participant.user_id,
                status=participant.status,
                joined_at=participant.joined_at,
                full_name=profile.full_name if profile else None,
                avatar_url=profile.avatar_url if profile else None,
            ))
        return GameDetail(**base.model_dump(), participants=participants)

    @staticmethod
    async def create_game(db: AsyncSession, host: User, data: Dict[str, Any]) -> Game:
        errors = {}
        if data["sport"] not in SPORT_TYPES:
            errors["sport"] = "Choose a sport from the list"
        if data["game_date"] < date.today():
            errors["game_date"] = "Pick today or a future date"
        try:
            data["game_time"] = normalize_time(data["game_time"])
        except ValueError:
            errors["game_time"] = "Times must use HH:MM"
        if errors:
            raise ValidationError(errors)

        if data.get("venue_id") is not None and await db.get(Venue, data["venue_id"]) is None:
            raise NotFoundError("Venue", data["venue_id"])

        game = Game(host_id=host.id, status=GameStatus.OPEN, **data)
        db.add(game)
        await db.commit()
        await db.refresh(game)
        logger.info("Game created", extra={"game_id": str(game.id), "host_id": str(host.id)})
        return game

    @staticmethod
    def _check_joinable(user: User, game: Game) -> Optional[GameParticipant]:
        """
        Enforce the joining rules. Returns an unpaid seat the user already
        holds, which a new checkout may reuse.
        """
        if game.status != GameStatus.OPEN:
            raise BookingError("This game is no longer open", code="GAME_CLOSED")
        if game.game_date < date.today():
            raise BookingError("This game has already taken place", code="GAME_CLOSED")
        if game.host_id == user.id:
            raise BookingError("You are hosting this game", code="HOST_CANNOT_JOIN")

        existing = next((p for p in game.participants if p.user_id == user.id), None)
        if existing is not None and existing.status == ParticipantStatus.CONFIRMED:
            raise ConflictError("You have already joined this game")
        if GameService._seats_taken(game, exclude=existing) >= game.max_players:
            raise GameFullError(str(game.id), game.max_players)
        return existing

    @staticmethod
    def _seats_taken(game: Game, exclude: Optional[GameParticipant] = None) -> int:
        return sum(1 for p in game.participants if p is not exclude and p.holds_seat)

    @staticmethod
    def _notify_host(db: AsyncSession, game: Game, user: User) -> None:
        notification_service.notify(
            db,
            game.host_id,
            "game",
            "New player joined",
            f"A player joined your game \"{game.title}\".",
            link=f"/game/{game.id}"
        )

    @staticmethod
    async def join(db: AsyncSession, user: User, game_id: UUID) -> GameParticipant:
        async with redis_manager.lock(f"game:{game_id}"):
            game = await GameService.get_game(db, game_id, with_participants=True)
            if game.is_paid:
                raise BookingError("This game requires payment to join", code="PAYMENT_REQUIRED")
            existing = GameService._check_joinable(user, game)

            if existing is not None:
                participant = existing
                participant.status = ParticipantStatus.CONFIRMED
                participant.expires_at = None
            else:
                participant = GameParticipant(game_id=game.id, user_id=user.id, status=ParticipantStatus.CONFIRMED)
                game.participants.append(participant)
            GameService._notify_host(db, game, user)
            await db.commit()
            await db.refresh(participant)

        record_game_join(paid=False)
        logger.info("Player joined game", extra={"game_id": str(game.id), "user_id": str(user.id)})
        return participant

    @staticmethod
    async def leave(db: AsyncSession, user: User, game_id: UUID) -> None:
        result = await db.execute(
            select(GameParticipant).where(
                GameParticipant.game_id == game_id,
                GameParticipant.user_id == user.id
            )
        )
        participant = result.scalar_one_or_none()
        if participant is None:
            raise NotFoundError("Participation")
        await db.delete(participant)
        await db.commit()
        logger.info("Player left game", extra={"game_id": str(game_id), "user_id": str(user.id)})

    @staticmethod
    async def cancel(db: AsyncSession, user: User, game_id: UUID) -> Game:
        game = await GameService.get_game(db, game_id, with_participants=True)
        if game.host_id != user.id and not user.is_admin:
            raise AuthorizationError("Only the host can cancel this game")
        if game.status == GameStatus.CANCELLED:
            raise BookingError("This game is already cancelled", code="GAME_CLOSED")

        game.status = GameStatus.CANCELLED
        for participant in [p for p in game.participants if p.holds_seat]:
            notification_service.notify(
                db,
                participant.user_id,
                "game",
                "Game cancelled",
                f"\"{game.title}\" on {game.game_date.isoformat()} has been cancelled by the host.",
                link="/games"
            )
        await db.commit()
        await db.refresh(game)
        logger.info("Game cancelled", extra={"game_id": str(game.id)})
        return game

    @staticmethod
    async def my_games(db: AsyncSession, user: User) -> Dict[str, List[GameResponse]]:
        hosted = await db.execute(
            select(Game).where(Game.host_id == user.id).order_by(Game.game_date.desc())
        )
        joined = await db.execute(
            select(Game)
            .join(GameParticipant, GameParticipant.game_id == Game.id)
            .where(GameParticipant.user_id == user.id, occupies_seat())
            .order_by(Game.game_date.desc())
        )
        return {
            "hosted": await GameService.serialize_many(db, list(hosted.scalars().all())),
            "joined": await GameService.serialize_many(db, list(joined.scalars().all())),
        }

    # Paid games

    @staticmethod
    async def _drop_seat(db: AsyncSession, game: Game, participant: GameParticipant, session_id: str) -> bool:
        """Remove an unpaid seat that can no longer be confirmed, refunding any payment"""
        refunded = payment_service.refund_session(session_id)
        game.participants.remove(participant)
        await db.commit()
        logger.info(
            "Unconfirmed game seat dropped",
            extra={"game_id": str(game.id), "user_id": str(participant.user_id), "refunded": refunded}
        )
        return refunded

    @staticmethod
    async def create_checkout(db: AsyncSession, user: User, game_id: UUID) -> Dict[str, Any]:
        """
        Start paying for a seat. Without a Stripe key the seat is confirmed
        in demo mode; otherwise it is held for BOOKING_EXPIRATION_MINUTES.
        """
        async with redis_manager.lock(f"game:{game_id}"):
            game = await GameService.get_game(db, game_id, with_participants=True)
            if not game.is_paid:
                raise BookingError("This game is free to join", code="FREE_GAME")
            existing = GameService._check_joinable(user, game)

            if not settings.stripe_enabled:
                if existing is not None:
                    existing.status = ParticipantStatus.CONFIRMED
                    existing.expires_at = None
                else:
                    game.participants.append(
                        GameParticipant(game_id=game.id, user_id=user.id, status=ParticipantStatus.CONFIRMED)
                    )
                GameService._notify_host(db, game, user)
                await db.commit()

                record_game_join(paid=True)
                logger.info("Demo game payment confirmed", extra={"game_id": str(game.id), "user_id": str(user.id)})
                return {"demo": True, "success": True, "gameTitle": game.title}

            if (
                existing is not None
                and existing.checkout_session_id
                and not payment_service.close_unpaid_session(existing.checkout_session_id)
            ):
                raise ConflictError(
                    "A payment for this game is already in progress",
                    details={"session_id": existing.checkout_session_id}
                )

            expires_at = utcnow() + timedelta(minutes=settings.BOOKING_EXPIRATION_MINUTES)
            session = payment_service.create_checkout_session(
                amount=game.price_per_player,
                name=f"Game: {game.title}",
                description=f"{game.game_date.isoformat()} at {game.game_time} - {game.location}",
                success_path="/game-join-success",
                cancel_path=f"/game/{game.id}",
                customer_email=user.email,
                metadata={"game_id": str(game.id), "user_id": str(user.id)},
                expires_at=expires_at,
            )
            if existing is not None:
                existing.checkout_session_id = session["id"]
                existing.expires_at = expires_at
            else:
                game.participants.append(GameParticipant(
                    game_id=game.id,
                    user_id=user.id,
                    status=ParticipantStatus.PENDING_PAYMENT,
                    checkout_session_id=session["id"],
                    expires_at=expires_at,
                ))
            await db.commit()

        return {"url": session["url"], "sessionId": session["id"], "gameTitle": game.title}

    @staticmethod
    async def verify_payment(db: AsyncSession, user: User, session_id: str) -> Dict[str, Any]:
        """
        Confirm a paid seat. Seats in games that closed meanwhile, or whose
        hold lapsed after the game filled up, are dropped and refunded.
        """
        result = await db.execute(
            select(GameParticipant.game_id).where(
                GameParticipant.checkout_session_id == session_id,
                GameParticipant.user_id == user.id
            )
        )
        game_id = result.scalar_one_or_none()
        if game_id is None:
            raise NotFoundError("Game payment")

        async with redis_manager.lock(f"game:{game_id}"):
            game = await GameService.get_game(db, game_id, with_participants=True)
            participant = next(
                (p for p in game.participants if p.user_id == user.id and p.checkout_session_id == session_id),
                None
            )
            if participant is None:
                raise NotFoundError("Game payment")
            if participant.status == ParticipantStatus.CONFIRMED:
                return {"success": True, "gameTitle": game.title}

            if game.status != GameStatus.OPEN:
                refunded = await GameService._drop_seat(db, game, participant, session_id)
                raise BookingError(
                    "This game is no longer open",
                    code="GAME_CLOSED",
                    details={"refunded": refunded}
                )
            if not participant.holds_seat and GameService._seats_taken(game, exclude=participant) >= game.max_players:
                refunded = await GameService._drop_seat(db, game, participant, session_id)
                raise BookingError(
                    "This game filled up while your checkout was open",
                    code="GAME_FULL",
                    details={"refunded": refunded}
                )

            payment_service.retrieve_paid_session(session_id)
            participant.status = ParticipantStatus.CONFIRMED
            participant.expires_at = None
            GameService._notify_host(db, game, user)
            await db.commit()

        record_game_join(paid=True)
        logger.info("Game payment verified", extra={"game_id": str(game.id), "user_id": str(user.id)})
        return {"success": True, "gameTitle": game.title}


# Initialize global game service
game_service = GameService()
