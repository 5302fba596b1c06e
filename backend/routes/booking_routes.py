from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import get_scheduling_service
from backend.core.errors import SchedulingError
from backend.routes.errors import database_http_exception, scheduling_http_exception
from backend.scheduling.resolver import SchedulingService
from backend.schemas.booking import BookingResponse, CreateBookingRequest

router = APIRouter(tags=['bookings'])


@router.post('/users/{subject_id}/bookings', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    subject_id: str,
    data: CreateBookingRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        booking = service.create_booking(
            subject_id,
            data.candidate_email,
            data.start_at_utc,
            data.end_at_utc,
            data.booking_metadata(),
        )
    except SchedulingError as exc:
        raise scheduling_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return BookingResponse.model_validate(booking)


@router.get('/users/{subject_id}/bookings', response_model=list[BookingResponse])
def list_bookings(
    subject_id: str,
    from_at: datetime | None = Query(default=None, alias='from'),
    to_at: datetime | None = Query(default=None, alias='to'),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        bookings = service.list_bookings(subject_id, from_at, to_at)
    except SchedulingError as exc:
        raise scheduling_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return [BookingResponse.model_validate(booking) for booking in bookings]


@router.delete('/bookings/{booking_id}')
def cancel_booking(
    booking_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        service.cancel_booking(booking_id)
    except SchedulingError as exc:
        raise scheduling_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return {'ok': True}
