from datetime import date, timedelta

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from booking.core.availability import day_of_week
from booking.routes.availability_routes import (
    CreateAvailabilityRequest,
    UpdateAvailabilityRequest,
    create_availability,
    delete_availability,
    get_day_availability,
    list_availabilities,
    list_bookable_dates,
    update_availability,
)

MONDAY = date(2026, 1, 5)


def test_create_availability_request_normalizes_times() -> None:
    request = CreateAvailabilityRequest(user_id=1, day_of_week=3, start_time=' 08:30 ', end_time='12:00 ')

    assert request.start_time == '08:30'
    assert request.end_time == '12:00'
    assert request.is_active is True


@pytest.mark.parametrize(
    'fields',
    [
        {'day_of_week': 7, 'start_time': '09:00', 'end_time': '17:00'},
        {'day_of_week': -1, 'start_time': '09:00', 'end_time': '17:00'},
        {'day_of_week': 1, 'start_time': '9:00', 'end_time': '17:00'},
        {'day_of_week': 1, 'start_time': '17:00', 'end_time': '09:00'},
        {'day_of_week': 1, 'start_time': '09:00', 'end_time': '09:00'},
    ],
)
def test_create_availability_request_rejects_invalid_windows(fields: dict) -> None:
    with pytest.raises(ValidationError):
        CreateAvailabilityRequest(user_id=1, **fields)


def test_create_availability_request_allows_inverted_window_when_inactive() -> None:
    request = CreateAvailabilityRequest(
        user_id=1,
        day_of_week=0,
        is_active=False,
        start_time='17:00',
        end_time='09:00',
    )

    assert request.is_active is False


def test_create_availability_rejects_second_entry_for_same_day(repository, provider) -> None:
    user, _service = provider

    with pytest.raises(HTTPException) as exception_info:
        create_availability(
            CreateAvailabilityRequest(user_id=user.id, day_of_week=1, start_time='10:00', end_time='12:00'),
            repository=repository,
        )

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'Availability for this day of the week already exists.'


def test_create_availability_maps_unique_index_violation_to_conflict(repository, provider, monkeypatch) -> None:
    user, _service = provider
    # Another request inserted the same day between the lookup and the insert.
    monkeypatch.setattr(repository, 'find_availability_for_day', lambda user_id, weekday: None)

    with pytest.raises(HTTPException) as exception_info:
        create_availability(
            CreateAvailabilityRequest(user_id=user.id, day_of_week=1, start_time='10:00', end_time='12:00'),
            repository=repository,
        )

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'Availability for this day of the week already exists.'
    assert len(list_availabilities(user.id, repository=repository)) == 7


def test_update_availability_maps_unique_index_violation_to_conflict(repository, provider, monkeypatch) -> None:
    user, _service = provider
    sunday = next(entry for entry in list_availabilities(user.id, repository=repository) if entry.day_of_week == 0)
    monkeypatch.setattr(repository, 'find_availability_for_day', lambda user_id, weekday: None)

    with pytest.raises(HTTPException) as exception_info:
        update_availability(sunday.id, UpdateAvailabilityRequest(day_of_week=1), repository=repository)

    assert exception_info.value.status_code == 409
    assert repository.get_availability(sunday.id).day_of_week == 0


def test_create_availability_returns_not_found_for_missing_user(repository) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_availability(
            CreateAvailabilityRequest(user_id=42, day_of_week=1, start_time='10:00', end_time='12:00'),
            repository=repository,
        )

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'User not found.'


def test_list_availabilities_orders_by_day(repository, provider) -> None:
    user, _service = provider

    entries = list_availabilities(user.id, repository=repository)

    assert [entry.day_of_week for entry in entries] == list(range(7))


def test_update_availability_applies_partial_changes(repository, provider) -> None:
    user, _service = provider
    tuesday = repository.find_availability_for_day(user.id, 2)

    updated = update_availability(
        tuesday.id,
        UpdateAvailabilityRequest(is_active=True, end_time='12:00'),
        repository=repository,
    )

    assert updated.is_active is True
    assert updated.start_time == '09:00'
    assert updated.end_time == '12:00'


def test_update_availability_rejects_inverted_window(repository, provider) -> None:
    user, _service = provider
    monday = repository.find_availability_for_day(user.id, 1)

    with pytest.raises(HTTPException) as exception_info:
        update_availability(monday.id, UpdateAvailabilityRequest(end_time='08:00'), repository=repository)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Start time must be before end time.'


def test_update_availability_rejects_moving_onto_taken_day(repository, provider) -> None:
    user, _service = provider
    monday = repository.find_availability_for_day(user.id, 1)

    with pytest.raises(HTTPException) as exception_info:
        update_availability(monday.id, UpdateAvailabilityRequest(day_of_week=3), repository=repository)

    assert exception_info.value.status_code == 409


def test_update_availability_rejects_explicit_null() -> None:
    with pytest.raises(ValidationError):
        UpdateAvailabilityRequest(start_time=None)


def test_delete_availability_then_missing(repository, provider) -> None:
    user, _service = provider
    sunday = repository.find_availability_for_day(user.id, 0)

    delete_availability(sunday.id, repository=repository)

    with pytest.raises(HTTPException) as exception_info:
        delete_availability(sunday.id, repository=repository)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Availability not found.'


def test_get_day_availability_lists_slots_and_open_slots(repository, provider, frozen_now) -> None:
    user, _service = provider

    response = get_day_availability(user.id, MONDAY, service_id=None, repository=repository)

    assert response.day_of_week == 1
    assert response.is_bookable is True
    assert response.slots == ['09:00', '10:00', '11:00', '12:00', '13:00', '14:00', '15:00', '16:00']
    assert response.open_slots == ['12:00', '13:00', '14:00', '15:00', '16:00']


def test_get_day_availability_sizes_slots_by_service(repository, provider, frozen_now) -> None:
    user, _service = provider
    long_service = repository.create_service(
        user_id=user.id,
        name='Strategy',
        description='',
        duration_minutes=90,
    )

    response = get_day_availability(user.id, MONDAY + timedelta(days=7), service_id=long_service.id, repository=repository)

    assert response.slots == ['09:00', '10:30', '12:00', '13:30', '15:00', '16:30']
    assert response.open_slots == response.slots


def test_get_day_availability_is_empty_for_inactive_day(repository, provider, frozen_now) -> None:
    user, _service = provider

    response = get_day_availability(user.id, MONDAY + timedelta(days=1), service_id=None, repository=repository)

    assert response.is_bookable is False
    assert response.slots == []
    assert response.open_slots == []


def test_get_day_availability_returns_not_found_for_missing_service(repository, provider, frozen_now) -> None:
    user, _service = provider

    with pytest.raises(HTTPException) as exception_info:
        get_day_availability(user.id, MONDAY, service_id=999, repository=repository)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Service not found.'


def test_get_day_availability_rejects_service_of_another_provider(repository, provider, frozen_now) -> None:
    _user, service = provider
    other = repository.create_user(username='other', name='Other Provider', email='other@example.com')
    repository.create_availability(
        user_id=other.id,
        day_of_week=1,
        is_active=True,
        start_time='09:00',
        end_time='17:00',
    )

    with pytest.raises(HTTPException) as exception_info:
        get_day_availability(other.id, MONDAY, service_id=service.id, repository=repository)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'This service is not offered by the selected provider.'


def test_get_day_availability_uses_default_settings_when_unset(repository, frozen_now) -> None:
    user = repository.create_user(username='fresh', name='Fresh Provider', email='fresh@example.com')
    repository.create_availability(
        user_id=user.id,
        day_of_week=1,
        is_active=True,
        start_time='09:00',
        end_time='11:00',
    )

    response = get_day_availability(user.id, MONDAY, service_id=None, repository=repository)

    assert response.slots == ['09:00', '10:00']
    assert response.open_slots == []


def test_list_bookable_dates_returns_active_weekdays_within_window(repository, provider) -> None:
    user, _service = provider
    today = date.today()

    bookable = list_bookable_dates(user.id, days=14, repository=repository)

    expected = [
        today + timedelta(days=offset)
        for offset in range(14)
        if day_of_week(today + timedelta(days=offset)) == 1
    ]
    assert bookable == expected


def test_list_bookable_dates_is_capped_by_max_advance(repository, provider) -> None:
    user, _service = provider
    repository.update_settings(user.id, max_advance_days=6)

    bookable = list_bookable_dates(user.id, days=60, repository=repository)

    assert len(bookable) == 1
    assert (bookable[0] - date.today()).days <= 6
