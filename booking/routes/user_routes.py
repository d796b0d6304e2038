from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from booking.repository import BookingRepository
from booking.routes.common import database_unavailable, ensure_database_ready, get_repository, not_found

router = APIRouter(tags=['users'])


class CreateUserRequest(BaseModel):
    username: str
    name: str
    email: str
    profile_image: str | None = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Username is required.')
        return normalized

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized:
            raise ValueError('A valid email address is required.')
        return normalized


def username_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail='This username is already taken.',
    )


class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    email: str
    profile_image: str | None = None

    class Config:
        from_attributes = True


@router.post('/users', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(data: CreateUserRequest, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        if repository.get_user_by_username(data.username):
            raise username_taken()

        return repository.create_user(**data.model_dump())
    except IntegrityError as exc:
        repository.rollback()
        raise username_taken() from exc
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc


@router.get('/users/{user_id}', response_model=UserResponse)
def get_user(user_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        user = repository.get_user(user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if user is None:
        raise not_found('User')

    return user
