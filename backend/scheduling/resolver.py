"""Booking conflict resolution and the caller-facing scheduling operations.

Each operation runs in its own transactional scope; nothing is cached between
calls, so every free-slot query and booking attempt is derived from the rules
and bookings currently in the store.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable

from sqlalchemy.orm import sessionmaker

from backend.core.config import Settings
from backend.core.errors import BadRange, SchedulingError, SlotNotAvailable
from backend.database import session_scope
from backend.models.availability import AvailabilityRule
from backend.models.booking import STATUS_CONFIRMED, Booking
from backend.scheduling.slots import Slot, expand_rules
from backend.scheduling.timeline import normalize_instant
from backend.stores.booking_store import BookingStore
from backend.stores.rule_store import RuleStore

logger = logging.getLogger(__name__)


class AttemptState(enum.Enum):
    VALIDATING = 'validating'
    CHECKING = 'checking'
    RESERVING = 'reserving'
    CONFIRMED = 'confirmed'
    REJECTED = 'rejected'


@dataclass
class ReservationAttempt:
    subject_id: str
    start_at: datetime
    end_at: datetime
    state: AttemptState = AttemptState.VALIDATING
    booking: Booking | None = None
    error: SchedulingError | None = None
    history: list[AttemptState] = field(default_factory=list)

    def advance(self, state: AttemptState) -> None:
        self.history.append(self.state)
        self.state = state

    def reject(self, error: SchedulingError) -> None:
        self.error = error
        self.advance(AttemptState.REJECTED)


def require_range(from_at: datetime, to_at: datetime) -> tuple[datetime, datetime]:
    from_at = normalize_instant(from_at)
    to_at = normalize_instant(to_at)
    if not from_at < to_at:
        raise BadRange('from must be before to')
    return from_at, to_at


class SchedulingService:
    def __init__(
        self,
        session_factory: sessionmaker,
        settings: Settings,
        rule_store: RuleStore | None = None,
        booking_store: BookingStore | None = None,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.rule_store = rule_store or RuleStore(reject_duplicate_days=settings.reject_duplicate_rule_days)
        self.booking_store = booking_store or BookingStore()

    @property
    def lookup_pad(self) -> timedelta:
        return timedelta(minutes=self.settings.booking_lookup_pad_minutes)

    # Availability rules

    def set_availability(self, subject_id: str, rules: Iterable[Any]) -> list[AvailabilityRule]:
        """Insert every rule for ``subject_id`` in one transaction, all or nothing."""
        with session_scope(self.session_factory) as db:
            saved_rules = []
            for rule in rules:
                saved_rules.append(
                    self.rule_store.insert(
                        db,
                        AvailabilityRule(
                            subject_id=subject_id,
                            day_of_week=rule.day_of_week,
                            start_time=rule.start_time,
                            end_time=rule.end_time,
                            slot_length_minutes=rule.slot_length_minutes,
                            available=rule.available,
                        ),
                    )
                )
            return saved_rules

    def update_availability(self, subject_id: str, rule_id: int, patch: dict[str, Any]) -> AvailabilityRule:
        with session_scope(self.session_factory) as db:
            return self.rule_store.update_by_id(db, subject_id, rule_id, patch)

    def list_availability(self, subject_id: str) -> list[AvailabilityRule]:
        with session_scope(self.session_factory) as db:
            return self.rule_store.list_by_subject(db, subject_id)

    # Slots

    def get_free_slots(self, subject_id: str, from_at: datetime, to_at: datetime) -> list[Slot]:
        from_at, to_at = require_range(from_at, to_at)

        with session_scope(self.session_factory) as db:
            rules = self.rule_store.list_by_subject(db, subject_id)
            if not rules:
                return []

            candidates = list(expand_rules(rules, from_at, to_at))
            bookings = self.booking_store.list_in_range(
                db,
                subject_id,
                from_at - self.lookup_pad,
                to_at + self.lookup_pad,
                status=STATUS_CONFIRMED,
            )

        # Subtraction matches on exact start only; an unaligned booking is not subtracted.
        booked_starts = {booking.start_at for booking in bookings}
        return [slot for slot in candidates if slot.start_at not in booked_starts]

    # Bookings

    def attempt_booking(
        self,
        subject_id: str,
        contact: str,
        start_at: datetime,
        end_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> ReservationAttempt:
        """Run one reservation attempt to a terminal state without raising domain errors."""
        attempt = ReservationAttempt(subject_id=subject_id, start_at=start_at, end_at=end_at)

        try:
            attempt.start_at, attempt.end_at = require_range(start_at, end_at)
        except BadRange:
            attempt.reject(BadRange('start must be before end'))
            return attempt

        attempt.advance(AttemptState.CHECKING)
        try:
            with session_scope(self.session_factory) as db:
                rules = self.rule_store.list_by_subject(db, subject_id)
            # Closed range: the requested window itself must be among the candidates.
            requested = Slot(attempt.start_at, attempt.end_at)
            matched = any(slot == requested for slot in expand_rules(rules, attempt.start_at, attempt.end_at))
        except SchedulingError as exc:
            attempt.reject(exc)
            return attempt
        if not matched:
            attempt.reject(SlotNotAvailable())
            return attempt

        attempt.advance(AttemptState.RESERVING)
        try:
            with session_scope(self.session_factory) as db:
                attempt.booking = self.booking_store.reserve(
                    db,
                    subject_id,
                    contact,
                    attempt.start_at,
                    attempt.end_at,
                    metadata,
                )
        except SchedulingError as exc:
            logger.info('Reservation for %s at %s rejected: %s', subject_id, attempt.start_at, exc.detail)
            attempt.reject(exc)
            return attempt

        attempt.advance(AttemptState.CONFIRMED)
        logger.info('Confirmed booking %s for %s at %s', attempt.booking.id, subject_id, attempt.start_at)
        return attempt

    def create_booking(
        self,
        subject_id: str,
        contact: str,
        start_at: datetime,
        end_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> Booking:
        attempt = self.attempt_booking(subject_id, contact, start_at, end_at, metadata)
        if attempt.state is AttemptState.REJECTED:
            raise attempt.error
        return attempt.booking

    def list_bookings(
        self,
        subject_id: str,
        from_at: datetime | None = None,
        to_at: datetime | None = None,
    ) -> list[Booking]:
        if (from_at is None) != (to_at is None):
            raise BadRange('from and to must be supplied together')
        if from_at is not None:
            from_at, to_at = require_range(from_at, to_at)

        with session_scope(self.session_factory) as db:
            return self.booking_store.list_in_range(db, subject_id, from_at, to_at)

    def cancel_booking(self, booking_id: str) -> None:
        with session_scope(self.session_factory) as db:
            self.booking_store.cancel(db, booking_id)
