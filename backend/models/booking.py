"""Booking model definitions."""

import uuid

from sqlalchemy import Column, DateTime, Index, String, text

from backend.database import Base
from backend.scheduling.timeline import utc_now

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"


def _new_booking_id() -> str:
    return str(uuid.uuid4())


class Booking(Base):
    """Represents a confirmed or cancelled reservation of one time window."""
    __tablename__ = "bookings"
    __table_args__ = (
        Index(
            "ux_bookings_subject_start_confirmed",
            "subject_id",
            "start_at",
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
            sqlite_where=text("status = 'confirmed'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=_new_booking_id)
    subject_id = Column(String, nullable=False, index=True)
    candidate_contact = Column(String, nullable=False)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=STATUS_CONFIRMED)
    title = Column(String)
    description = Column(String)
    source = Column(String)
    type = Column(String)
    created_at = Column(DateTime, default=utc_now)
