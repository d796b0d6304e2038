"""Availability resolution for the public booking flow.

Everything in this module is a pure function of its arguments: callers fetch
fresh weekly availability and settings from the repository before each call,
and pass ``today`` / ``now`` explicitly when they need reproducible results.

Wall-clock values are ``HH:MM`` strings in the provider's local time. No
timezone conversion is performed anywhere.
"""

from collections.abc import Iterable
from datetime import date, datetime, time

from booking.core import config
from booking.core.exceptions import InvalidDuration, MalformedTimeFormat
from booking.core.records import BookingSettings, WeeklyAvailability

MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> time:
    if not isinstance(value, str):
        raise MalformedTimeFormat(f'Expected an HH:MM string, got {value!r}.')

    hours, separator, minutes = value.strip().partition(':')
    if (
        not separator
        or len(hours) != 2
        or len(minutes) != 2
        or not hours.isdigit()
        or not minutes.isdigit()
    ):
        raise MalformedTimeFormat(f'Time {value!r} is not in HH:MM format.')

    hour, minute = int(hours), int(minutes)
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise MalformedTimeFormat(f'Time {value!r} is out of range.')

    return time(hour, minute)


def format_time(value: time) -> str:
    return f'{value.hour:02d}:{value.minute:02d}'


def _to_minutes(value: str) -> int:
    parsed = parse_time(value)
    return parsed.hour * 60 + parsed.minute


def _from_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes % MINUTES_PER_DAY, 60)
    return f'{hours:02d}:{minutes:02d}'


def _require_positive(minutes: int, label: str) -> None:
    if minutes <= 0:
        raise InvalidDuration(f'{label} must be greater than zero, got {minutes}.')


def day_of_week(day: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def find_day_availability(
    weekly_availability: Iterable[WeeklyAvailability],
    weekday: int,
) -> WeeklyAvailability | None:
    for entry in weekly_availability:
        if entry.day_of_week == weekday:
            return entry
    return None


def is_date_bookable(
    day: date,
    weekly_availability: Iterable[WeeklyAvailability],
    settings: BookingSettings,
    today: date | None = None,
) -> bool:
    """
    Decide whether ``day`` can be offered to clients at all.

    Only the date-level rules are applied here: not in the past, not past the
    advance window, and an active weekly entry for that weekday. Minimum
    notice is a time-of-day rule and belongs to ``is_within_booking_window``.
    """
    today = today or date.today()

    if day < today:
        return False

    # Offsets, not shifted dates: max_advance_days may reach past date.max.
    if (day - today).days > settings.max_advance_days:
        return False

    entry = find_day_availability(weekly_availability, day_of_week(day))
    if entry is None or not entry.is_active:
        return False

    return True


def generate_time_slots(
    start_time: str,
    end_time: str,
    interval_minutes: int = config.DEFAULT_SLOT_INTERVAL_MINUTES,
) -> list[str]:
    """
    List slot start times from ``start_time`` up to, but excluding, ``end_time``.

    Only the slot start is compared with ``end_time``; a slot may run past the
    end of the window when the interval does not divide it evenly.
    """
    _require_positive(interval_minutes, 'Slot interval')

    current = _to_minutes(start_time)
    window_end = _to_minutes(end_time)

    slots: list[str] = []
    while current < window_end:
        slots.append(_from_minutes(current))
        current += interval_minutes

    return slots


def get_available_slots_for_date(
    day: date,
    weekly_availability: Iterable[WeeklyAvailability],
    settings: BookingSettings,
    duration_minutes: int | None = None,
    today: date | None = None,
) -> list[str]:
    entries = list(weekly_availability)
    if not is_date_bookable(day, entries, settings, today=today):
        return []

    entry = find_day_availability(entries, day_of_week(day))
    interval = duration_minutes if duration_minutes is not None else config.DEFAULT_SLOT_INTERVAL_MINUTES

    return generate_time_slots(entry.start_time, entry.end_time, interval)


def is_within_booking_window(
    day: date,
    start_time: str,
    settings: BookingSettings,
    now: datetime,
) -> bool:
    """
    Check a concrete start instant against minimum notice and maximum advance.

    Must be re-evaluated when a booking is submitted, since the clock moves
    between listing slots and submitting one.
    """
    start_instant = datetime.combine(day, parse_time(start_time))

    if (start_instant - now).total_seconds() < settings.min_notice_minutes * 60:
        return False

    if (day - now.date()).days > settings.max_advance_days:
        return False

    return True


def compute_end_time(start_time: str, duration_minutes: int) -> str:
    """
    Add ``duration_minutes`` to ``start_time``.

    Wraps past midnight (``23:30`` + 60 is ``00:30``) without signalling a date
    change; appointments are assumed to end on the day they start.
    """
    _require_positive(duration_minutes, 'Duration')
    return _from_minutes(_to_minutes(start_time) + duration_minutes)
