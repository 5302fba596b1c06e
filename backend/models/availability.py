"""Availability rule model definitions."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Time

from backend.database import Base
from backend.scheduling.timeline import utc_now


class AvailabilityRule(Base):
    """Represents a recurring weekly availability window for one subject."""
    __tablename__ = "availability_rules"
    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_rules_day_of_week"),
        CheckConstraint("slot_length_minutes > 0", name="ck_availability_rules_slot_length"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_id = Column(String, nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # Sunday=0
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_length_minutes = Column(Integer, nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)
