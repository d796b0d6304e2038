"""User model definitions."""

from sqlalchemy import Column, Integer, String
from booking.database import Base


class User(Base):
    """Represents a service provider with a public booking page."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    profile_image = Column(String)
