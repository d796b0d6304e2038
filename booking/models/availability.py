"""Availability model definitions."""

from sqlalchemy import Column, Integer, Boolean, ForeignKey, String, UniqueConstraint
from booking.database import Base


class Availability(Base):
    """Represents a provider's working window for one day of the week."""
    __tablename__ = "availabilities"
    __table_args__ = (
        UniqueConstraint("user_id", "day_of_week", name="uq_availabilities_user_day"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday
    is_active = Column(Boolean, nullable=False, default=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
