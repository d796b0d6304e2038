"""Booking settings model definitions."""

from sqlalchemy import Column, Integer, ForeignKey
from booking.core import config
from booking.database import Base


class Settings(Base):
    """Represents a provider's booking window and buffer configuration."""
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    buffer_before_minutes = Column(Integer, nullable=False, default=config.DEFAULT_BUFFER_MINUTES)
    buffer_after_minutes = Column(Integer, nullable=False, default=config.DEFAULT_BUFFER_MINUTES)
    min_notice_minutes = Column(Integer, nullable=False, default=config.DEFAULT_MIN_NOTICE_MINUTES)
    max_advance_days = Column(Integer, nullable=False, default=config.DEFAULT_MAX_ADVANCE_DAYS)
