"""
Base model class with common fields
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Uuid, func
import uuid

from sportsbnb.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_past(moment: Optional[datetime]) -> bool:
    """Whether a stored timestamp has passed; naive values are UTC"""
    if moment is None:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment <= utcnow()


class BaseModel(Base):
    """
    Abstract base model with common fields
    """
    __abstract__ = True
    __mapper_args__ = {"eager_defaults": True}

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
