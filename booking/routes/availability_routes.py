import logging
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from booking.core.availability import (
    day_of_week,
    get_available_slots_for_date,
    is_date_bookable,
    is_within_booking_window,
    parse_time,
)
from booking.core.exceptions import SchedulingError
from booking.repository import BookingRepository
from booking.routes.common import (
    database_unavailable,
    ensure_database_ready,
    get_repository,
    invalid_scheduling_input,
    not_found,
    service_not_offered,
)

router = APIRouter(tags=['availability'])

logger = logging.getLogger(__name__)

MAX_BOOKABLE_DATES_RANGE_DAYS = 366


def _validate_day_of_week(value: int) -> int:
    if value not in range(7):
        raise ValueError('Day of week must be between 0 (Sunday) and 6 (Saturday).')
    return value


def _validate_window(is_active: bool, start_time: str, end_time: str) -> None:
    if is_active and parse_time(start_time) >= parse_time(end_time):
        raise ValueError('Start time must be before end time.')


class CreateAvailabilityRequest(BaseModel):
    user_id: int
    day_of_week: int
    is_active: bool = True
    start_time: str
    end_time: str

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, value: int) -> int:
        return _validate_day_of_week(value)

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, value: str) -> str:
        parse_time(value)
        return value.strip()

    @model_validator(mode='after')
    def validate_window_order(self) -> 'CreateAvailabilityRequest':
        _validate_window(self.is_active, self.start_time, self.end_time)
        return self


class UpdateAvailabilityRequest(BaseModel):
    day_of_week: int | None = None
    is_active: bool | None = None
    start_time: str | None = None
    end_time: str | None = None

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, value: int | None) -> int:
        if value is None:
            raise ValueError('Day of week cannot be null.')
        return _validate_day_of_week(value)

    @field_validator('is_active')
    @classmethod
    def validate_is_active(cls, value: bool | None) -> bool:
        if value is None:
            raise ValueError('is_active cannot be null.')
        return value

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Times cannot be null.')
        parse_time(value)
        return value.strip()


class AvailabilityResponse(BaseModel):
    id: int
    user_id: int
    day_of_week: int
    is_active: bool
    start_time: str
    end_time: str

    class Config:
        from_attributes = True


class DayAvailabilityResponse(BaseModel):
    date: date
    day_of_week: int
    is_bookable: bool
    slots: list[str]
    open_slots: list[str]


def day_of_week_conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail='Availability for this day of the week already exists.',
    )


@router.get('/users/{user_id}/availabilities', response_model=list[AvailabilityResponse])
def list_availabilities(user_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        return repository.list_availabilities(user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/availabilities', response_model=AvailabilityResponse, status_code=status.HTTP_201_CREATED)
def create_availability(data: CreateAvailabilityRequest, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        if repository.get_user(data.user_id) is None:
            raise not_found('User')

        if repository.find_availability_for_day(data.user_id, data.day_of_week):
            raise day_of_week_conflict()

        return repository.create_availability(**data.model_dump())
    except IntegrityError as exc:
        repository.rollback()
        raise day_of_week_conflict() from exc
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc


@router.put('/availabilities/{availability_id}', response_model=AvailabilityResponse)
def update_availability(
    availability_id: int,
    data: UpdateAvailabilityRequest,
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        existing = repository.get_availability(availability_id)
        if existing is None:
            raise not_found('Availability')

        changes = data.model_dump(exclude_unset=True)
        merged = {
            'day_of_week': existing.day_of_week,
            'is_active': existing.is_active,
            'start_time': existing.start_time,
            'end_time': existing.end_time,
            **changes,
        }

        try:
            _validate_window(merged['is_active'], merged['start_time'], merged['end_time'])
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(exc),
            ) from exc

        if merged['day_of_week'] != existing.day_of_week:
            clash = repository.find_availability_for_day(existing.user_id, merged['day_of_week'])
            if clash is not None and clash.id != existing.id:
                raise day_of_week_conflict()

        return repository.update_availability(availability_id, **changes)
    except IntegrityError as exc:
        repository.rollback()
        raise day_of_week_conflict() from exc
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc


@router.delete('/availabilities/{availability_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(availability_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        deleted = repository.delete_availability(availability_id)
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc

    if not deleted:
        raise not_found('Availability')


@router.get('/users/{user_id}/availability/{slot_date}', response_model=DayAvailabilityResponse)
def get_day_availability(
    user_id: int,
    slot_date: date,
    service_id: int | None = Query(default=None),
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        weekly_availability = repository.list_weekly_availability(user_id)
        settings = repository.get_booking_settings(user_id)
        service = repository.get_service(service_id) if service_id is not None else None
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if service_id is not None and service is None:
        raise not_found('Service')

    if service is not None and service.user_id != user_id:
        raise service_not_offered()

    duration_minutes = service.duration_minutes if service else None
    now = datetime.now()

    try:
        is_bookable = is_date_bookable(slot_date, weekly_availability, settings, today=now.date())
        slots = get_available_slots_for_date(
            slot_date,
            weekly_availability,
            settings,
            duration_minutes=duration_minutes,
            today=now.date(),
        )
        open_slots = [
            slot_time
            for slot_time in slots
            if is_within_booking_window(slot_date, slot_time, settings, now)
        ]
    except SchedulingError as exc:
        logger.warning('Stored availability for user %s is malformed: %s', user_id, exc)
        raise invalid_scheduling_input(exc) from exc

    return DayAvailabilityResponse(
        date=slot_date,
        day_of_week=day_of_week(slot_date),
        is_bookable=is_bookable,
        slots=slots,
        open_slots=open_slots,
    )


@router.get('/users/{user_id}/bookable-dates', response_model=list[date])
def list_bookable_dates(
    user_id: int,
    days: int = Query(default=30, ge=1, le=MAX_BOOKABLE_DATES_RANGE_DAYS),
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        weekly_availability = repository.list_weekly_availability(user_id)
        settings = repository.get_booking_settings(user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    today = date.today()
    last_day = today + timedelta(days=min(days - 1, settings.max_advance_days))

    bookable_dates: list[date] = []
    current_day = today
    while current_day <= last_day:
        if is_date_bookable(current_day, weekly_availability, settings, today=today):
            bookable_dates.append(current_day)
        current_day += timedelta(days=1)

    return bookable_dates
