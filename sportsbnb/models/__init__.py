"""
Database models
"""

from sportsbnb.models.user import User, UserRole
from sportsbnb.models.profile import Profile
from sportsbnb.models.venue import Venue, VenueHours, BlockedDate
from sportsbnb.models.booking import Booking, BookingStatus, BookingSource, PaymentStatus
from sportsbnb.models.game import Game, GameParticipant, GameStatus, ParticipantStatus, SkillLevel
from sportsbnb.models.review import Review
from sportsbnb.models.notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Profile",
    "Venue",
    "VenueHours",
    "BlockedDate",
    "Booking",
    "BookingStatus",
    "BookingSource",
    "PaymentStatus",
    "Game",
    "GameParticipant",
    "GameStatus",
    "ParticipantStatus",
    "SkillLevel",
    "Review",
    "Notification"
]
