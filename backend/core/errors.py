"""Domain errors raised by the scheduling core.

Routes translate these into HTTP responses; the core itself never retries.
"""


class SchedulingError(Exception):
    """Base class for every rejection the scheduling core can report."""

    detail = 'Scheduling request rejected.'

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class BadRange(SchedulingError):
    detail = 'from must be before to'


class InvalidRule(SchedulingError):
    detail = 'end_time must be after start_time'


class RuleAlreadyExists(SchedulingError):
    detail = 'availability already exists for this day'


class RuleNotFound(SchedulingError):
    detail = 'availability not found'


class SlotNotAvailable(SchedulingError):
    detail = 'slot not available'


class SlotTaken(SchedulingError):
    detail = 'slot already booked'


class BookingNotFound(SchedulingError):
    detail = 'booking not found'


class AlreadyCancelled(SchedulingError):
    detail = 'booking already cancelled'
