"""
In-app notification model
"""

from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from sportsbnb.models.base import BaseModel


class Notification(BaseModel):
    """
    Message shown in the user's notification dropdown
    """
    __tablename__ = "notifications"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # booking, game, review, system
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(255))
    is_read = Column(Boolean, default=False, nullable=False, index=True)

    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification(user_id={self.user_id}, type={self.type}, read={self.is_read})>"
