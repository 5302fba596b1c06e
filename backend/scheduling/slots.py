from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, NamedTuple, Protocol

from backend.core.errors import InvalidRule
from backend.scheduling.timeline import day_of_week


class Slot(NamedTuple):
    start_at: datetime
    end_at: datetime


class RuleLike(Protocol):
    id: object
    day_of_week: int
    start_time: time
    end_time: time
    slot_length_minutes: int
    available: bool


def check_rule_window(start_time: time, end_time: time, slot_length_minutes: int) -> None:
    if end_time <= start_time:
        raise InvalidRule('end_time must be after start_time')
    if slot_length_minutes is None or slot_length_minutes <= 0:
        raise InvalidRule('slot_length_minutes must be positive')


def iterate_days(from_at: datetime, to_at: datetime) -> Iterator[date]:
    current_day = from_at.date()
    while current_day <= to_at.date():
        yield current_day
        current_day += timedelta(days=1)


def chunk_rule_window(rule: RuleLike, day: date) -> Iterator[Slot]:
    """Split one rule's window on ``day`` into whole slots; a trailing partial chunk is dropped."""
    check_rule_window(rule.start_time, rule.end_time, rule.slot_length_minutes)

    window_start = datetime.combine(day, rule.start_time)
    window_end = datetime.combine(day, rule.end_time)
    slot_length = timedelta(minutes=rule.slot_length_minutes)

    current = window_start
    while current + slot_length <= window_end:
        yield Slot(current, current + slot_length)
        current += slot_length


def expand_rules(rules: Iterable[RuleLike], from_at: datetime, to_at: datetime) -> Iterator[Slot]:
    """Yield candidate slots for ``rules`` intersecting the half-open range ``[from_at, to_at)``.

    Every calendar day touched by the range is visited, including the day of
    ``to_at``. Slots come out ordered by start; slots from overlapping rules are
    all kept, even when they share a start.
    """
    rules = list(rules)

    for day in iterate_days(from_at, to_at):
        weekday = day_of_week(day)
        day_slots: list[Slot] = []

        for rule in rules:
            if rule.day_of_week != weekday:
                continue

            for slot in chunk_rule_window(rule, day):
                if slot.end_at <= from_at or slot.start_at >= to_at:
                    continue
                if not rule.available:
                    continue
                day_slots.append(slot)

        # Stable sort keeps rule order for identical windows.
        day_slots.sort()
        yield from day_slots
