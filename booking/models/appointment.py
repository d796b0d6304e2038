"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, String
from booking.database import Base

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
APPOINTMENT_STATUSES = (STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_COMPLETED)


class Appointment(Base):
    """Represents a client booking."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    # Not a foreign key: services can be deleted while their appointments remain.
    service_id = Column(Integer, nullable=False)
    client_name = Column(String, nullable=False)
    client_email = Column(String, nullable=False)
    client_phone = Column(String)
    notes = Column(String)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    status = Column(String, nullable=False, default=STATUS_CONFIRMED)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
