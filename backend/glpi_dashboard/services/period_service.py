from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from glpi_dashboard.errors import ValidationError

DAY_START = time(0, 0, 0)
DAY_END = time(23, 59, 59)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def bounds(self) -> tuple[datetime, datetime]:
        """Return (start 00:00:00, end 23:59:59)."""
        return datetime.combine(self.start, DAY_START), datetime.combine(self.end, DAY_END)


@dataclass(frozen=True)
class ResolvedPeriods:
    current: DateWindow
    comparison: DateWindow


def parse_day(value: str | date, field: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` day, raising ValidationError if it is not a real date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid {field} date: {value!r}")


def previous_month(day: date) -> DateWindow:
    """Full calendar month immediately before the month containing ``day``."""
    last = day.replace(day=1) - timedelta(days=1)
    return DateWindow(start=last.replace(day=1), end=last)


def resolve_periods(start: str | date, end: str | date) -> ResolvedPeriods:
    """Resolve the current window and its comparison month.

    The comparison window only depends on ``start``: it is always the whole
    month before the one ``start`` falls in, whatever ``end`` is.
    """
    start_day = parse_day(start, "start")
    end_day = parse_day(end, "end")
    try:
        comparison = previous_month(start_day)
    except OverflowError:
        # January of year 1 has no previous month
        raise ValidationError(f"Invalid start date: {start!r} has no previous month")
    return ResolvedPeriods(
        current=DateWindow(start=start_day, end=end_day),
        comparison=comparison,
    )
