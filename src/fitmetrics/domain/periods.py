"""Period keys and date normalization.

Day-grained entities (diary entries, surveys) are keyed by their UTC calendar
day; week-grained entities (measurements) by the Monday of their week. Dates
are always compared in this canonical form, never as raw timestamps.
"""

from datetime import UTC, date, datetime, timedelta

from fitmetrics.errors import InvalidInput

SUNDAY = 7


def to_day(value: date | datetime | str) -> date:
    """Return the UTC calendar day for a date, datetime or ISO string."""
    if isinstance(value, str):
        return parse_day(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(UTC).date()
    return value


def week_start(value: date | datetime | str) -> date:
    """Return the Monday that opens the week containing ``value``."""
    day = to_day(value)
    weekday = day.isoweekday()
    if weekday == SUNDAY:
        return day - timedelta(days=6)
    return day - timedelta(days=weekday - 1)


def period_key(value: date | datetime | str) -> int:
    """Return the comparable integer key ``year*10000 + month*100 + day``."""
    day = to_day(value)
    return day.year * 10000 + day.month * 100 + day.day


def parse_day(raw: str, field: str = "date") -> date:
    """Parse ``YYYY-MM-DD`` or an ISO datetime string into a UTC day."""
    cleaned = raw.strip() if isinstance(raw, str) else ""
    if not cleaned:
        raise InvalidInput.for_field(field, "Invalid date format")
    try:
        if len(cleaned) == 10:  # noqa: PLR2004
            return date.fromisoformat(cleaned)
        return to_day(datetime.fromisoformat(cleaned.replace("Z", "+00:00")))
    except ValueError as exc:
        raise InvalidInput.for_field(field, "Invalid date format") from exc


def utc_today(now: datetime | None = None) -> date:
    """Return today's UTC day."""
    return to_day(now or datetime.now(tz=UTC))


def day_window(end: date, days: int) -> list[date]:
    """Return ``days`` consecutive days ending at ``end``, oldest first."""
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
