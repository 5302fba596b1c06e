from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from backend.routes.availability_routes import set_availability
from backend.routes.booking_routes import cancel_booking, create_booking, list_bookings
from backend.schemas.availability import AvailabilityRuleRequest
from backend.schemas.booking import CreateBookingRequest


@pytest.fixture
def monday_availability(service):
    rule = AvailabilityRuleRequest(day_of_week=1, start_time='09:00', end_time='10:00', slot_length_minutes=30)
    return set_availability(subject_id='subject-1', rules=[rule], service=service)


def _booking_request(start: str = '2026-01-05T09:00:00Z', end: str = '2026-01-05T09:30:00Z', **overrides):
    payload = {
        'candidate_email': ' candidate@example.com ',
        'start_at_utc': start,
        'end_at_utc': end,
        'title': 'Intro call',
    }
    payload.update(overrides)
    return CreateBookingRequest(**payload)


def test_create_booking_request_normalizes_fields() -> None:
    request = _booking_request(start='2026-01-05T04:00:00-05:00', end='2026-01-05T04:30:00-05:00')

    assert request.candidate_email == 'candidate@example.com'
    assert request.start_at_utc == datetime(2026, 1, 5, 9, 0)
    assert request.end_at_utc.tzinfo is None
    assert request.booking_metadata()['title'] == 'Intro call'


@pytest.mark.parametrize(
    'overrides',
    [
        {'candidate_email': '   '},
        {'start': '2026-01-05T09:30:00Z', 'end': '2026-01-05T09:00:00Z'},
        {'start': '2026-01-05T09:00:00Z', 'end': '2026-01-05T09:00:00Z'},
        {'start': 'not-a-date'},
    ],
)
def test_create_booking_request_rejects_bad_payloads(overrides) -> None:
    with pytest.raises(ValidationError):
        _booking_request(**overrides)


def test_create_booking_returns_confirmed_booking(service, monday_availability) -> None:
    booking = create_booking(subject_id='subject-1', data=_booking_request(), service=service)

    assert booking.status == 'confirmed'
    assert booking.user_id == 'subject-1'
    assert booking.candidate_email == 'candidate@example.com'
    assert booking.start_at_utc == datetime(2026, 1, 5, 9, 0)
    assert booking.title == 'Intro call'


def test_create_booking_conflict_when_slot_taken(service, monday_availability) -> None:
    create_booking(subject_id='subject-1', data=_booking_request(), service=service)

    with pytest.raises(HTTPException) as exception_info:
        create_booking(subject_id='subject-1', data=_booking_request(), service=service)

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'slot already booked'


def test_create_booking_outside_availability_is_bad_request(service, monday_availability) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            subject_id='subject-1',
            data=_booking_request(start='2026-01-05T11:00:00Z', end='2026-01-05T11:30:00Z'),
            service=service,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'slot not available'


def test_list_bookings_with_and_without_range(service, monday_availability) -> None:
    create_booking(subject_id='subject-1', data=_booking_request(), service=service)

    everything = list_bookings(subject_id='subject-1', from_at=None, to_at=None, service=service)
    next_week = list_bookings(
        subject_id='subject-1',
        from_at=datetime(2026, 1, 12, tzinfo=timezone.utc),
        to_at=datetime(2026, 1, 12, tzinfo=timezone.utc) + timedelta(days=1),
        service=service,
    )

    assert len(everything) == 1
    assert next_week == []


def test_list_bookings_requires_both_bounds(service) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_bookings(subject_id='subject-1', from_at=datetime(2026, 1, 5), to_at=None, service=service)

    assert exception_info.value.status_code == 400


def test_cancel_booking_then_cancel_again_conflicts(service, monday_availability) -> None:
    booking = create_booking(subject_id='subject-1', data=_booking_request(), service=service)

    assert cancel_booking(booking_id=booking.id, service=service) == {'ok': True}
    with pytest.raises(HTTPException) as exception_info:
        cancel_booking(booking_id=booking.id, service=service)

    assert exception_info.value.status_code == 409


def test_cancel_missing_booking_is_not_found(service) -> None:
    with pytest.raises(HTTPException) as exception_info:
        cancel_booking(booking_id='missing', service=service)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'booking not found'
