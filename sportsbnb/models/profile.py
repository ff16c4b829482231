"""
Profile model
"""

from sqlalchemy import Column, String, Boolean, Text, Date, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship

from sportsbnb.models.base import BaseModel


class Profile(BaseModel):
    """
    Public and onboarding data for a user
    """
    __tablename__ = "profiles"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    user_type = Column(String(20), default="player", nullable=False)
    full_name = Column(String(255))
    username = Column(String(50), unique=True)
    email = Column(String(255))
    phone = Column(String(20))
    avatar_url = Column(Text)
    city = Column(String(100))
    date_of_birth = Column(Date)
    gender = Column(String(20))

    # Player preferences
    preferred_sports = Column(JSON, default=list)
    skill_level = Column(String(20))

    # Owner business details
    business_name = Column(String(255))
    venue_name = Column(String(255))
    venue_address = Column(Text)
    venue_description = Column(Text)
    sports_offered = Column(JSON, default=list)

    preferred_currency = Column(String(3))
    notification_preferences = Column(JSON, default=dict)
    onboarding_completed = Column(Boolean, default=False, nullable=False)

    stripe_account_id = Column(String(255))
    stripe_onboarding_completed = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, full_name={self.full_name}, type={self.user_type})>"
