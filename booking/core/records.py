"""Plain records consumed by the availability resolver."""

from dataclasses import dataclass

from booking.core import config


@dataclass(frozen=True)
class WeeklyAvailability:
    day_of_week: int  # 0=Sunday, 6=Saturday
    is_active: bool
    start_time: str
    end_time: str


@dataclass(frozen=True)
class BookingSettings:
    min_notice_minutes: int = config.DEFAULT_MIN_NOTICE_MINUTES
    max_advance_days: int = config.DEFAULT_MAX_ADVANCE_DAYS
    # Stored with the provider's settings but not applied to slot generation.
    buffer_before_minutes: int = config.DEFAULT_BUFFER_MINUTES
    buffer_after_minutes: int = config.DEFAULT_BUFFER_MINUTES


@dataclass(frozen=True)
class ServiceRecord:
    id: int
    user_id: int
    name: str
    duration_minutes: int
    price_cents: int | None = None
