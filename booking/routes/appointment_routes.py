import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from booking.core.availability import (
    compute_end_time,
    get_available_slots_for_date,
    is_date_bookable,
    is_within_booking_window,
    parse_time,
)
from booking.core.exceptions import SchedulingError
from booking.models.appointment import (
    APPOINTMENT_STATUSES,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
    Appointment,
)
from booking.repository import BookingRepository
from booking.routes.common import (
    database_unavailable,
    ensure_database_ready,
    get_repository,
    invalid_scheduling_input,
    not_found,
    service_not_offered,
)

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_APPOINTMENT_NOTES_LENGTH = 600
ALLOWED_STATUS_TRANSITIONS = {
    STATUS_CONFIRMED: {STATUS_CANCELLED, STATUS_COMPLETED},
    STATUS_CANCELLED: set(),
    STATUS_COMPLETED: set(),
}


class CreateAppointmentRequest(BaseModel):
    user_id: int
    service_id: int
    client_name: str
    client_email: str
    client_phone: str | None = None
    notes: str | None = None
    date: date
    start_time: str

    @field_validator('client_name')
    @classmethod
    def validate_client_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Client name is required.')
        return normalized

    @field_validator('client_email')
    @classmethod
    def validate_client_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized:
            raise ValueError('A valid client email is required.')
        return normalized

    @field_validator('client_phone')
    @classmethod
    def validate_client_phone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        parse_time(value)
        return value.strip()


class UpdateAppointmentStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_STATUSES:
            raise ValueError('Invalid appointment status.')
        return normalized


class AppointmentResponse(BaseModel):
    id: int
    user_id: int
    service_id: int
    service_name: str | None = None
    client_name: str
    client_email: str
    client_phone: str | None = None
    notes: str | None = None
    date: date
    start_time: str
    end_time: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


def build_appointment_responses(
    appointments: list[Appointment],
    repository: BookingRepository,
) -> list[AppointmentResponse]:
    """Attach service names, leaving them empty for services deleted since booking."""
    service_names: dict[int, str | None] = {}
    responses: list[AppointmentResponse] = []

    for appointment in appointments:
        if appointment.service_id not in service_names:
            service = repository.get_service(appointment.service_id)
            service_names[appointment.service_id] = service.name if service else None

        response = AppointmentResponse.model_validate(appointment)
        response.service_name = service_names[appointment.service_id]
        responses.append(response)

    return responses


def booking_rejected(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


@router.get('/users/{user_id}/appointments', response_model=list[AppointmentResponse])
def list_appointments(user_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        return build_appointment_responses(repository.list_appointments(user_id), repository)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/users/{user_id}/appointments/date/{appointment_date}', response_model=list[AppointmentResponse])
def list_appointments_by_date(
    user_id: int,
    appointment_date: date,
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        appointments = repository.list_appointments_by_date(user_id, appointment_date)
        return build_appointment_responses(appointments, repository)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/appointments/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(appointment_id: int, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        appointment = repository.get_appointment(appointment_id)
        if appointment is None:
            raise not_found('Appointment')

        return build_appointment_responses([appointment], repository)[0]
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/appointments', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, repository: BookingRepository = Depends(get_repository)):
    ensure_database_ready()

    try:
        service = repository.get_service(data.service_id)
        if service is None:
            raise not_found('Service')

        if service.user_id != data.user_id:
            raise service_not_offered()

        weekly_availability = repository.list_weekly_availability(data.user_id)
        settings = repository.get_booking_settings(data.user_id)
        # Re-check against the clock at submission; slots may have been listed minutes ago.
        now = datetime.now()

        try:
            if not is_date_bookable(data.date, weekly_availability, settings, today=now.date()):
                logger.debug('Rejected booking for user %s: %s is not bookable', data.user_id, data.date)
                raise booking_rejected('No times are available on this date.')

            offered_slots = get_available_slots_for_date(
                data.date,
                weekly_availability,
                settings,
                duration_minutes=service.duration_minutes,
                today=now.date(),
            )
            if data.start_time not in offered_slots:
                raise booking_rejected('This time is not offered for the selected service.')

            if not is_within_booking_window(data.date, data.start_time, settings, now):
                logger.debug(
                    'Rejected booking for user %s: %s %s is outside the booking window at %s',
                    data.user_id,
                    data.date,
                    data.start_time,
                    now,
                )
                raise booking_rejected(
                    f'Appointments must be booked at least {settings.min_notice_minutes} minutes ahead '
                    f'and no more than {settings.max_advance_days} days in advance.'
                )

            end_time = compute_end_time(data.start_time, service.duration_minutes)
        except SchedulingError as exc:
            raise invalid_scheduling_input(exc) from exc

        appointment = repository.create_appointment(
            user_id=data.user_id,
            service_id=data.service_id,
            client_name=data.client_name,
            client_email=data.client_email,
            client_phone=data.client_phone,
            notes=data.notes,
            date=data.date,
            start_time=data.start_time,
            end_time=end_time,
            status=STATUS_CONFIRMED,
        )

        # Notifications are not delivered; the log line stands in for the confirmation email.
        logger.info(
            'Sending confirmation email to %s for appointment on %s at %s',
            appointment.client_email,
            appointment.date,
            appointment.start_time,
        )

        response = AppointmentResponse.model_validate(appointment)
        response.service_name = service.name
        return response
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc


@router.patch('/appointments/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateAppointmentStatusRequest,
    repository: BookingRepository = Depends(get_repository),
):
    ensure_database_ready()

    try:
        appointment = repository.get_appointment(appointment_id)
        if appointment is None:
            raise not_found('Appointment')

        if data.status != appointment.status:
            if data.status not in ALLOWED_STATUS_TRANSITIONS.get(appointment.status, set()):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f'Cannot change a {appointment.status} appointment to {data.status}.',
                )

            appointment = repository.update_appointment(appointment_id, status=data.status)
            logger.info(
                'Sending status update email to %s - appointment is now %s',
                appointment.client_email,
                appointment.status,
            )

        return build_appointment_responses([appointment], repository)[0]
    except SQLAlchemyError as exc:
        repository.rollback()
        raise database_unavailable() from exc
