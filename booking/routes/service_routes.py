from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from booking.repository import BookingRepository
from booking.routes.common import database_unavailable, ensure_database_ready, get_repository, not_found

router = APIRouter(tags=['services'])

MAX_SERVICE_DURATION_MINUTES = 24 * 60


def _validate_duration(value: int) -> int:
    if value <= 0:
        raise ValueError('Duration must be greater than zero.')
    if value > MAX_SERVICE_DURATION_MINUTES:
        raise ValueError('Duration cannot exceed one day.')
    return value


def _validate_price(value: int | None) -> int | None:
    if value is not None and value < 0:
        raise ValueError('Price cannot be negative.')
    return value


class CreateServiceRequest(BaseModel):
    user_id: int
    name: str
    description: str = ''
    duration_minutes: int
    price_cents: int | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Service name is required.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str) -> str:
        return value.strip()

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration_minutes(cls, value: int) -> int:
        return _validate_duration(value)

    @field_validator('price_cents')
    @classmethod
    def validate_price_cents(cls, value: int | None) -> int | None:
        return _validate_price(value)


class UpdateServiceRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    duration_minutes: int | None = None
    price_cents: int | None = None

    # Explicit nulls reach the validators; omitted fields do not.
    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str:
        normalized = (value or '').strip()
        if not normalized:
            raise ValueError('Service name cannot be blank.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str:
        return (value or '').strip()

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration_minutes(cls, value: int | None) -> int:
        if value is None:
            raise ValueError('Duration is required.')
        return _validate_duration(value)

    @field_validator('price_cents')
    @classmethod
    def validate_price_cents(cls, value: int | None) -> int | None:
        return _validate_price(value)


class ServiceResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: str
    duration_minutes: int
    price_cents: int | None = None

    class Config:
        from_attributes = True


@router.get('/users/{user_id}/services', response_model=list[ServiceResponse])
def list_services(user_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        return repository.list_services(user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/services', response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(data: CreateServiceRequest, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        if repository.get_user(data.user_id) is None:
            raise not_found('User')

        return repository.create_service(**data.model_dump())
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc


@router.put('/services/{service_id}', response_model=ServiceResponse)
def update_service(
    service_id: int,
    data: UpdateServiceRequest,
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        service = repository.update_service(service_id, **data.model_dump(exclude_unset=True))
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc

    if service is None:
        raise not_found('Service')

    return service


@router.delete('/services/{service_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_service(service_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        deleted = repository.delete_service(service_id)
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc

    if not deleted:
        raise not_found('Service')
