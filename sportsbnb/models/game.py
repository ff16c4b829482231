"""
Pickup game and participant models
"""

from sqlalchemy import (
    Column, String, Integer, Text, Boolean, Float, Numeric, Date, DateTime,
    ForeignKey, Enum, Uuid, UniqueConstraint, and_, func, or_
)
from sqlalchemy.orm import relationship
import enum

from sportsbnb.models.base import BaseModel, is_past, utcnow


class GameStatus(str, enum.Enum):
    OPEN = "open"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SkillLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ALL = "all"


class ParticipantStatus(str, enum.Enum):
    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"


class Game(BaseModel):
    """
    Player-organised pickup session
    """
    __tablename__ = "games"

    host_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    venue_id = Column(Uuid(as_uuid=True), ForeignKey("venues.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    sport = Column(String(50), nullable=False, index=True)
    skill_level = Column(String(20), nullable=False, default=SkillLevel.ALL.value)
    location = Column(String(255), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    game_date = Column(Date, nullable=False, index=True)
    game_time = Column(String(5), nullable=False)
    duration_hours = Column(Integer, default=1, nullable=False)
    max_players = Column(Integer, nullable=False)
    price_per_player = Column(Numeric(10, 2), default=0, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    status = Column(
        Enum(GameStatus),
        default=GameStatus.OPEN,
        nullable=False,
        index=True
    )

    # Relationships
    host = relationship("User", foreign_keys=[host_id])
    participants = relationship("GameParticipant", back_populates="game", cascade="all, delete-orphan")

    @property
    def is_paid(self) -> bool:
        return bool(self.price_per_player) and self.price_per_player > 0

    def __repr__(self):
        return f"<Game(id={self.id}, title={self.title}, sport={self.sport}, status={self.status})>"


class GameParticipant(BaseModel):
    """
    A player's seat in a game
    """
    __tablename__ = "game_participants"
    __table_args__ = (
        UniqueConstraint("game_id", "user_id", name="uq_game_participant"),
    )

    game_id = Column(Uuid(as_uuid=True), ForeignKey("games.id"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        Enum(ParticipantStatus),
        default=ParticipantStatus.CONFIRMED,
        nullable=False
    )
    checkout_session_id = Column(String(255), unique=True)
    expires_at = Column(DateTime(timezone=True))  # End of an unpaid seat hold
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    game = relationship("Game", back_populates="participants")
    user = relationship("User")

    @property
    def holds_seat(self) -> bool:
        if self.status == ParticipantStatus.CONFIRMED:
            return True
        return self.expires_at is not None and not is_past(self.expires_at)

    def __repr__(self):
        return f"<GameParticipant(game_id={self.game_id}, user_id={self.user_id}, status={self.status})>"


def occupies_seat(now=None):
    """Filter for participants counted against ``max_players``"""
    now = now or utcnow()
    return or_(
        GameParticipant.status == ParticipantStatus.CONFIRMED,
        and_(GameParticipant.status == ParticipantStatus.PENDING_PAYMENT, GameParticipant.expires_at > now),
    )
