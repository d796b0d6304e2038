from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from booking.core import config
from booking.repository import BookingRepository
from booking.routes.common import database_unavailable, ensure_database_ready, get_repository, not_found

router = APIRouter(tags=['settings'])

SETTINGS_FIELDS = (
    'buffer_before_minutes',
    'buffer_after_minutes',
    'min_notice_minutes',
    'max_advance_days',
)

MAX_BUFFER_MINUTES = 24 * 60
MAX_MIN_NOTICE_MINUTES = 365 * 24 * 60
MAX_ADVANCE_DAYS = 5 * 365


class CreateSettingsRequest(BaseModel):
    user_id: int
    buffer_before_minutes: int = Field(default=config.DEFAULT_BUFFER_MINUTES, ge=0, le=MAX_BUFFER_MINUTES)
    buffer_after_minutes: int = Field(default=config.DEFAULT_BUFFER_MINUTES, ge=0, le=MAX_BUFFER_MINUTES)
    min_notice_minutes: int = Field(default=config.DEFAULT_MIN_NOTICE_MINUTES, ge=0, le=MAX_MIN_NOTICE_MINUTES)
    max_advance_days: int = Field(default=config.DEFAULT_MAX_ADVANCE_DAYS, ge=0, le=MAX_ADVANCE_DAYS)


class UpdateSettingsRequest(BaseModel):
    buffer_before_minutes: int | None = Field(default=None, ge=0, le=MAX_BUFFER_MINUTES)
    buffer_after_minutes: int | None = Field(default=None, ge=0, le=MAX_BUFFER_MINUTES)
    min_notice_minutes: int | None = Field(default=None, ge=0, le=MAX_MIN_NOTICE_MINUTES)
    max_advance_days: int | None = Field(default=None, ge=0, le=MAX_ADVANCE_DAYS)

    @field_validator(*SETTINGS_FIELDS)
    @classmethod
    def validate_not_null(cls, value: int | None) -> int:
        if value is None:
            raise ValueError('Settings values cannot be null.')
        return value


class SettingsResponse(BaseModel):
    id: int
    user_id: int
    buffer_before_minutes: int
    buffer_after_minutes: int
    min_notice_minutes: int
    max_advance_days: int

    class Config:
        from_attributes = True


@router.get('/users/{user_id}/settings', response_model=SettingsResponse)
def get_settings(user_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        settings = repository.get_settings(user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if settings is None:
        raise not_found('Settings')

    return settings


@router.post('/settings', response_model=SettingsResponse, status_code=status.HTTP_201_CREATED)
def create_settings(data: CreateSettingsRequest, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        if repository.get_user(data.user_id) is None:
            raise not_found('User')

        if repository.get_settings(data.user_id) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='Settings already exist for this user.',
            )

        return repository.create_settings(**data.model_dump())
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc


@router.put('/users/{user_id}/settings', response_model=SettingsResponse)
def update_settings(
    user_id: int,
    data: UpdateSettingsRequest,
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        settings = repository.update_settings(user_id, **data.model_dump(exclude_unset=True))
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc

    if settings is None:
        raise not_found('Settings')

    return settings
