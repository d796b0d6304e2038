"""Service model definitions."""

from sqlalchemy import Column, Integer, String, ForeignKey
from booking.database import Base


class Service(Base):
    """Represents a bookable service offered by a provider."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer)
