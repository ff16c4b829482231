"""
User model
"""

from sqlalchemy import Column, String, Boolean, Enum, Text
from sqlalchemy.orm import relationship
import enum

from sportsbnb.models.base import BaseModel


class UserRole(str, enum.Enum):
    PLAYER = "player"
    OWNER = "owner"
    ADMIN = "admin"


class User(BaseModel):
    """
    User account used for authentication; display data lives on Profile
    """
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole),
        default=UserRole.PLAYER,
        nullable=False
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Two-factor authentication
    two_factor_enabled = Column(Boolean, default=False, nullable=False)
    totp_secret = Column(String(64))
    backup_codes = Column(Text)  # comma separated, consumed on use

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    venues = relationship("Venue", back_populates="owner", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.role in (UserRole.OWNER, UserRole.ADMIN)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
