from typing import Any

from sqlalchemy.orm import Session

from backend.core.errors import InvalidRule, RuleAlreadyExists, RuleNotFound
from backend.models.availability import AvailabilityRule
from backend.scheduling.slots import check_rule_window
from backend.scheduling.timeline import utc_now

PATCHABLE_FIELDS = ('day_of_week', 'start_time', 'end_time', 'slot_length_minutes', 'available')


class RuleStore:
    """Persists weekly availability rules; concurrent edits are last-write-wins."""

    def __init__(self, reject_duplicate_days: bool = False):
        self.reject_duplicate_days = reject_duplicate_days

    def insert(self, db: Session, rule: AvailabilityRule) -> AvailabilityRule:
        check_rule_window(rule.start_time, rule.end_time, rule.slot_length_minutes)

        self._check_day_free(db, rule.subject_id, rule.day_of_week)

        now = utc_now()
        rule.created_at = now
        rule.updated_at = now
        if rule.available is None:
            rule.available = True

        db.add(rule)
        db.flush()
        return rule

    def _check_day_free(self, db: Session, subject_id: str, day_of_week: int, exclude_id: int | None = None) -> None:
        if not self.reject_duplicate_days:
            return

        query = db.query(AvailabilityRule.id).filter(
            AvailabilityRule.subject_id == subject_id,
            AvailabilityRule.day_of_week == day_of_week,
        )
        if exclude_id is not None:
            query = query.filter(AvailabilityRule.id != exclude_id)
        if query.first():
            raise RuleAlreadyExists(f'availability already exists for day {day_of_week}')

    def list_by_subject(self, db: Session, subject_id: str) -> list[AvailabilityRule]:
        return db.query(AvailabilityRule).filter(
            AvailabilityRule.subject_id == subject_id,
        ).order_by(AvailabilityRule.id.asc()).all()

    def update_by_id(
        self,
        db: Session,
        subject_id: str,
        rule_id: int,
        patch: dict[str, Any],
    ) -> AvailabilityRule:
        rule = db.query(AvailabilityRule).filter(
            AvailabilityRule.id == rule_id,
            AvailabilityRule.subject_id == subject_id,
        ).first()
        if rule is None:
            raise RuleNotFound()

        for field, value in patch.items():
            if field not in PATCHABLE_FIELDS:
                raise InvalidRule(f'{field} cannot be updated')
            setattr(rule, field, value)

        check_rule_window(rule.start_time, rule.end_time, rule.slot_length_minutes)
        if 'day_of_week' in patch:
            self._check_day_free(db, subject_id, rule.day_of_week, exclude_id=rule.id)

        rule.updated_at = utc_now()
        db.flush()
        return rule
