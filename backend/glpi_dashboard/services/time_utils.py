from datetime import datetime

MINUTES_IN_DAY = 1440
MINUTES_IN_ALMOST_TWO_DAYS = 2520
MINUTES_IN_MONTH = 43200
MINUTES_IN_TWO_MONTHS = 86400


def local_now() -> datetime:
    """Naive local wall-clock time, comparable with the store's timestamps."""
    return datetime.now()


def as_local(value: datetime) -> datetime:
    """Drop the timezone of an aware datetime after converting it to local time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_distance(earlier: datetime, later: datetime) -> str:
    """Describe the gap between two datetimes in words ("about 3 hours", "5 days").

    Buckets follow the usual relative-time wording: minutes up to 45,
    "about N hours" up to a day, days up to a month, then months and years.
    """
    seconds = abs((as_local(later) - as_local(earlier)).total_seconds())
    minutes = round(seconds / 60)

    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    if minutes < 90:
        return "about 1 hour"
    if minutes < MINUTES_IN_DAY:
        return f"about {_plural(round(minutes / 60), 'hour')}"
    if minutes < MINUTES_IN_ALMOST_TWO_DAYS:
        return "1 day"
    if minutes < MINUTES_IN_MONTH:
        return _plural(round(minutes / MINUTES_IN_DAY), "day")
    if minutes < MINUTES_IN_TWO_MONTHS:
        return f"about {_plural(round(minutes / MINUTES_IN_MONTH), 'month')}"

    months = round(minutes / MINUTES_IN_MONTH)
    if months < 12:
        return _plural(months, "month")

    years, remainder = divmod(months, 12)
    if remainder < 3:
        return f"about {_plural(years, 'year')}"
    if remainder < 9:
        return f"over {_plural(years, 'year')}"
    return f"almost {_plural(years + 1, 'year')}"
