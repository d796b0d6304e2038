"""Record store used by the booking API.

Routes talk to a ``BookingRepository`` instead of issuing queries directly, so
the availability functions in ``booking.core`` only ever see plain records.
"""

from datetime import date
from typing import Any, Protocol

from sqlalchemy.orm import Session

from booking.core.records import BookingSettings, ServiceRecord, WeeklyAvailability
from booking.models.appointment import Appointment
from booking.models.availability import Availability
from booking.models.service import Service
from booking.models.settings import Settings
from booking.models.user import User


class BookingRepository(Protocol):
    """Operations the booking API needs from the record store."""

    def list_weekly_availability(self, user_id: int) -> list[WeeklyAvailability]: ...

    def get_booking_settings(self, user_id: int) -> BookingSettings: ...

    def get_service(self, service_id: int) -> ServiceRecord | None: ...

    def create_user(self, **fields: Any) -> User: ...

    def get_user(self, user_id: int) -> User | None: ...

    def get_user_by_username(self, username: str) -> User | None: ...

    def list_services(self, user_id: int) -> list[Service]: ...

    def create_service(self, **fields: Any) -> Service: ...

    def update_service(self, service_id: int, **fields: Any) -> Service | None: ...

    def delete_service(self, service_id: int) -> bool: ...

    def list_availabilities(self, user_id: int) -> list[Availability]: ...

    def get_availability(self, availability_id: int) -> Availability | None: ...

    def find_availability_for_day(self, user_id: int, day_of_week: int) -> Availability | None: ...

    def create_availability(self, **fields: Any) -> Availability: ...

    def update_availability(self, availability_id: int, **fields: Any) -> Availability | None: ...

    def delete_availability(self, availability_id: int) -> bool: ...

    def get_settings(self, user_id: int) -> Settings | None: ...

    def create_settings(self, **fields: Any) -> Settings: ...

    def update_settings(self, user_id: int, **fields: Any) -> Settings | None: ...

    def list_appointments(self, user_id: int) -> list[Appointment]: ...

    def list_appointments_by_date(self, user_id: int, day: date) -> list[Appointment]: ...

    def get_appointment(self, appointment_id: int) -> Appointment | None: ...

    def create_appointment(self, **fields: Any) -> Appointment: ...

    def update_appointment(self, appointment_id: int, **fields: Any) -> Appointment | None: ...

    def rollback(self) -> None: ...


class SqlAlchemyBookingRepository:
    """``BookingRepository`` backed by a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _add(self, record):
        self._db.add(record)
        self._db.commit()
        self._db.refresh(record)
        return record

    def _update(self, record, fields: dict[str, Any]):
        if record is None:
            return None
        for key, value in fields.items():
            setattr(record, key, value)
        self._db.commit()
        self._db.refresh(record)
        return record

    def _delete(self, record) -> bool:
        if record is None:
            return False
        self._db.delete(record)
        self._db.commit()
        return True

    # Reads consumed by the availability resolver

    def list_weekly_availability(self, user_id: int) -> list[WeeklyAvailability]:
        return [
            WeeklyAvailability(
                day_of_week=row.day_of_week,
                is_active=bool(row.is_active),
                start_time=row.start_time,
                end_time=row.end_time,
            )
            for row in self.list_availabilities(user_id)
        ]

    def get_booking_settings(self, user_id: int) -> BookingSettings:
        row = self.get_settings(user_id)
        if row is None:
            return BookingSettings()

        return BookingSettings(
            min_notice_minutes=row.min_notice_minutes,
            max_advance_days=row.max_advance_days,
            buffer_before_minutes=row.buffer_before_minutes,
            buffer_after_minutes=row.buffer_after_minutes,
        )

    def get_service(self, service_id: int) -> ServiceRecord | None:
        row = self._db.get(Service, service_id)
        if row is None:
            return None

        return ServiceRecord(
            id=row.id,
            user_id=row.user_id,
            name=row.name,
            duration_minutes=row.duration_minutes,
            price_cents=row.price_cents,
        )

    # Users

    def create_user(self, **fields: Any) -> User:
        return self._add(User(**fields))

    def get_user(self, user_id: int) -> User | None:
        return self._db.get(User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return self._db.query(User).filter(User.username == username).first()

    # Services

    def list_services(self, user_id: int) -> list[Service]:
        return self._db.query(Service).filter(Service.user_id == user_id).order_by(Service.id.asc()).all()

    def create_service(self, **fields: Any) -> Service:
        return self._add(Service(**fields))

    def update_service(self, service_id: int, **fields: Any) -> Service | None:
        return self._update(self._db.get(Service, service_id), fields)

    def delete_service(self, service_id: int) -> bool:
        return self._delete(self._db.get(Service, service_id))

    # Weekly availability

    def list_availabilities(self, user_id: int) -> list[Availability]:
        return self._db.query(Availability).filter(
            Availability.user_id == user_id,
        ).order_by(Availability.day_of_week.asc()).all()

    def get_availability(self, availability_id: int) -> Availability | None:
        return self._db.get(Availability, availability_id)

    def find_availability_for_day(self, user_id: int, day_of_week: int) -> Availability | None:
        return self._db.query(Availability).filter(
            Availability.user_id == user_id,
            Availability.day_of_week == day_of_week,
        ).first()

    def create_availability(self, **fields: Any) -> Availability:
        return self._add(Availability(**fields))

    def update_availability(self, availability_id: int, **fields: Any) -> Availability | None:
        return self._update(self._db.get(Availability, availability_id), fields)

    def delete_availability(self, availability_id: int) -> bool:
        return self._delete(self._db.get(Availability, availability_id))

    # Settings

    def get_settings(self, user_id: int) -> Settings | None:
        return self._db.query(Settings).filter(Settings.user_id == user_id).first()

    def create_settings(self, **fields: Any) -> Settings:
        return self._add(Settings(**fields))

    def update_settings(self, user_id: int, **fields: Any) -> Settings | None:
        return self._update(self.get_settings(user_id), fields)

    # Appointments

    def list_appointments(self, user_id: int) -> list[Appointment]:
        return self._db.query(Appointment).filter(
            Appointment.user_id == user_id,
        ).order_by(Appointment.date.asc(), Appointment.start_time.asc()).all()

    def list_appointments_by_date(self, user_id: int, day: date) -> list[Appointment]:
        return self._db.query(Appointment).filter(
            Appointment.user_id == user_id,
            Appointment.date == day,
        ).order_by(Appointment.start_time.asc()).all()

    def get_appointment(self, appointment_id: int) -> Appointment | None:
        return self._db.get(Appointment, appointment_id)

    def create_appointment(self, **fields: Any) -> Appointment:
        return self._add(Appointment(**fields))

    def update_appointment(self, appointment_id: int, **fields: Any) -> Appointment | None:
        return self._update(self._db.get(Appointment, appointment_id), fields)

    def rollback(self) -> None:
        self._db.rollback()
