import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from booking.database import Base, ensure_schema  # noqa: E402
from booking.repository import SqlAlchemyBookingRepository  # noqa: E402
from booking.routes import (  # noqa: E402
    appointment_routes,
    availability_routes,
    service_routes,
    settings_routes,
    user_routes,
)

ROUTE_MODULES = (
    appointment_routes,
    availability_routes,
    service_routes,
    settings_routes,
    user_routes,
)


class FrozenDatetime(datetime):
    frozen_now = datetime(2026, 1, 5, 8, 0)

    @classmethod
    def now(cls, tz=None):
        return cls.frozen_now


@pytest.fixture
def booking_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    ensure_schema(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repository(booking_db, monkeypatch: pytest.MonkeyPatch):
    for module in ROUTE_MODULES:
        monkeypatch.setattr(module, 'ensure_database_ready', lambda: None)

    return SqlAlchemyBookingRepository(booking_db)


@pytest.fixture
def provider(repository):
    user = repository.create_user(username='provider', name='Pat Provider', email='pat@example.com')
    for day in range(7):
        repository.create_availability(
            user_id=user.id,
            day_of_week=day,
            is_active=day == 1,
            start_time='09:00',
            end_time='17:00',
        )
    repository.create_settings(
        user_id=user.id,
        buffer_before_minutes=10,
        buffer_after_minutes=10,
        min_notice_minutes=240,
        max_advance_days=30,
    )
    service = repository.create_service(
        user_id=user.id,
        name='Coaching',
        description='One-on-one coaching',
        duration_minutes=60,
        price_cents=12000,
    )
    return user, service


@pytest.fixture
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> datetime:
    monkeypatch.setattr(appointment_routes, 'datetime', FrozenDatetime)
    monkeypatch.setattr(availability_routes, 'datetime', FrozenDatetime)
    return FrozenDatetime.frozen_now
