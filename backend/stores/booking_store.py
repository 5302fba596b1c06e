import logging
from datetime import datetime
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.core.errors import AlreadyCancelled, BookingNotFound, SlotTaken
from backend.models.booking import STATUS_CANCELLED, STATUS_CONFIRMED, Booking
from backend.scheduling.timeline import utc_now

logger = logging.getLogger(__name__)

METADATA_FIELDS = ('title', 'description', 'source', 'type')


class BookingStore:
    """Persists reservations; at most one confirmed booking per (subject, start)."""

    def get(self, db: Session, booking_id: str) -> Booking | None:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    def list_in_range(
        self,
        db: Session,
        subject_id: str,
        from_at: datetime | None = None,
        to_at: datetime | None = None,
        status: str | None = None,
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.subject_id == subject_id)

        if from_at is not None:
            query = query.filter(Booking.start_at >= from_at)
        if to_at is not None:
            query = query.filter(Booking.start_at < to_at)
        if status is not None:
            query = query.filter(Booking.status == status)

        return query.order_by(Booking.start_at.asc()).all()

    def reserve(
        self,
        db: Session,
        subject_id: str,
        contact: str,
        start_at: datetime,
        end_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> Booking:
        """Insert a confirmed booking inside the caller's transaction.

        The existing confirmed row for the same start is locked before the
        insert decision; the partial unique index catches any writer that slips
        past the lock.
        """
        existing = db.query(Booking.id).filter(
            Booking.subject_id == subject_id,
            Booking.status == STATUS_CONFIRMED,
            Booking.start_at == start_at,
        ).with_for_update().first()
        if existing:
            raise SlotTaken()

        metadata = metadata or {}
        booking = Booking(
            subject_id=subject_id,
            candidate_contact=contact,
            start_at=start_at,
            end_at=end_at,
            status=STATUS_CONFIRMED,
            created_at=utc_now(),
            **{field: metadata.get(field) for field in METADATA_FIELDS},
        )
        db.add(booking)

        try:
            db.flush()
        except IntegrityError as exc:
            raise SlotTaken() from exc

        return booking

    def current_status(self, db: Session, booking_id: str) -> str | None:
        return db.query(Booking.status).filter(Booking.id == booking_id).scalar()

    def cancel(self, db: Session, booking_id: str) -> None:
        current_status = self.current_status(db, booking_id)
        if current_status is None:
            raise BookingNotFound()
        if current_status == STATUS_CANCELLED:
            raise AlreadyCancelled()

        result = db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status != STATUS_CANCELLED)
            .values(status=STATUS_CANCELLED)
        )
        if result.rowcount == 0:
            raise AlreadyCancelled()

        logger.info('Cancelled booking %s', booking_id)
