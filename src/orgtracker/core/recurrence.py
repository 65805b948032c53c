"""Pure recurrence logic - next deadlines and rule descriptions."""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from orgtracker.errors import RecurrenceError

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class RecurrenceType(Enum):
    """How often a recurring task repeats."""

    NONE = "none"
    MINUTELY = "minutely"  # Debug/testing cadence
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: "str | RecurrenceType | None") -> "RecurrenceType":
        """Parse a stored value, treating missing as NONE."""
        if value is None or value == "":
            return cls.NONE
        if isinstance(value, cls):
            return value
        try:
            return cls(value.lower())
        except ValueError:
            raise RecurrenceError(f"Unsupported recurrence type: {value}") from None


@dataclass(frozen=True)
class RecurrenceRule:
    """A recurrence configuration (day_of_week: 0=Sunday .. 6=Saturday)."""

    type: RecurrenceType
    interval: int = 1
    day_of_week: int | None = None
    day_of_month: int | None = None
    end_date: date | None = None

    def validate(self) -> "RecurrenceRule":
        """Raise RecurrenceError if any field is out of range."""
        if not isinstance(self.type, RecurrenceType):
            raise RecurrenceError(f"Unsupported recurrence type: {self.type}")
        if self.interval < 1:
            raise RecurrenceError(f"Recurrence interval must be >= 1, got {self.interval}")
        if self.day_of_week is not None and not 0 <= self.day_of_week <= 6:
            raise RecurrenceError(f"Day of week must be 0-6, got {self.day_of_week}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise RecurrenceError(f"Day of month must be 1-31, got {self.day_of_month}")
        return self


def _to_datetime(value: str | date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = value.strip()
    if "T" in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    return datetime.combine(date.fromisoformat(text), time.min)


def _to_date(value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return _to_datetime(value).date()


def _add_months(d: date, months: int, day: int) -> date:
    """Move d forward by months, clamping day to the target month's length."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day, monthrange(year, month)[1]))


def _sunday_based_weekday(d: date) -> int:
    return (d.weekday() + 1) % 7


def calculate_next_deadline(previous_deadline: str | date | datetime, rule: RecurrenceRule) -> str:
    """
    Calculate the next deadline for a recurring task.

    Pure function - no I/O. Returns a date-only ISO string.

    Weekly with a day_of_week moves to the next occurrence of that weekday
    strictly after the previous deadline, then adds (interval - 1) weeks.
    When the previous deadline already falls on that weekday the first step
    is a full week, so interval 2 lands 14 days later, never 7. The next
    deadline is always later than the previous one.

    Raises:
        RecurrenceError: for NONE, an unknown type, or an invalid rule.
    """
    rule.validate()
    prev = _to_datetime(previous_deadline)
    prev_date = prev.date()

    match rule.type:
        case RecurrenceType.MINUTELY:
            next_date = (prev + timedelta(minutes=rule.interval)).date()
        case RecurrenceType.DAILY:
            next_date = prev_date + timedelta(days=rule.interval)
        case RecurrenceType.WEEKLY:
            if rule.day_of_week is not None:
                # A target equal to the current weekday means a full week ahead
                days_until_target = (rule.day_of_week - _sunday_based_weekday(prev_date) + 7) % 7 or 7
                next_date = prev_date + timedelta(days=days_until_target + (rule.interval - 1) * 7)
            else:
                next_date = prev_date + timedelta(days=rule.interval * 7)
        case RecurrenceType.MONTHLY:
            target_day = rule.day_of_month if rule.day_of_month is not None else prev_date.day
            next_date = _add_months(prev_date, rule.interval, target_day)
        case RecurrenceType.YEARLY:
            next_date = _add_months(prev_date, rule.interval * 12, prev_date.day)
        case _:
            raise RecurrenceError(f"Unsupported recurrence type: {rule.type.value}")

    return next_date.isoformat()


def should_create_next_instance(next_deadline: str | date, end_date: str | date | None = None) -> bool:
    """True if there is no end date or the next deadline falls on/before it."""
    end = _to_date(end_date)
    if end is None:
        return True
    return _to_date(next_deadline) <= end


def ordinal_suffix(day: int) -> str:
    """English ordinal suffix: 1 -> st, 12 -> th, 22 -> nd."""
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def describe_recurrence(rule: RecurrenceRule) -> str:
    """Human-readable description, e.g. 'Every 2 weeks on Monday'."""
    interval = rule.interval

    def every(unit: str, single: str) -> str:
        return single if interval == 1 else f"Every {interval} {unit}"

    match rule.type:
        case RecurrenceType.MINUTELY:
            return every("minutes", "Every minute")
        case RecurrenceType.DAILY:
            return every("days", "Daily")
        case RecurrenceType.WEEKLY:
            base = every("weeks", "Weekly")
            if rule.day_of_week is not None:
                return f"{base} on {DAY_NAMES[rule.day_of_week]}"
            return base
        case RecurrenceType.MONTHLY:
            base = every("months", "Monthly")
            if rule.day_of_month is not None:
                return f"{base} on the {rule.day_of_month}{ordinal_suffix(rule.day_of_month)}"
            return base
        case RecurrenceType.YEARLY:
            return every("years", "Yearly")
        case _:
            return "No recurrence"
