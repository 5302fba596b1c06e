import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from backend.core.errors import (
    AlreadyCancelled,
    BadRange,
    BookingNotFound,
    InvalidRule,
    RuleAlreadyExists,
    RuleNotFound,
    SchedulingError,
    SlotNotAvailable,
    SlotTaken,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    BadRange: status.HTTP_400_BAD_REQUEST,
    InvalidRule: status.HTTP_400_BAD_REQUEST,
    SlotNotAvailable: status.HTTP_400_BAD_REQUEST,
    RuleAlreadyExists: status.HTTP_409_CONFLICT,
    SlotTaken: status.HTTP_409_CONFLICT,
    AlreadyCancelled: status.HTTP_409_CONFLICT,
    RuleNotFound: status.HTTP_404_NOT_FOUND,
    BookingNotFound: status.HTTP_404_NOT_FOUND,
}


def scheduling_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=exc.detail)


def database_http_exception(exc: SQLAlchemyError) -> HTTPException:
    logger.exception('Database operation failed.', exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail='Database unavailable. Verify DATABASE_URL and database credentials.',
    )
