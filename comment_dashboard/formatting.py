"""Human-readable labels for timestamps and durations."""

from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into a tz-aware datetime.

    A trailing ``Z`` is accepted and naive values are taken as UTC.
    Returns None for empty or unparseable input.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_millis(value: Optional[datetime]) -> Optional[int]:
    """Epoch milliseconds for a datetime, None passes through."""
    if value is None:
        return None
    return int(value.timestamp() * 1000)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Floor of the number of days from start to end (negative if end < start)."""
    return int((end - start).total_seconds() // SECONDS_PER_DAY)


def _format_time(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_date(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format a timestamp relative to ``now`` (local time by default).

    Examples (now = Thu 2026-10-15 10:00):
        2026-10-15 09:05 -> "Today 9:05 AM"
        2026-10-14 18:30 -> "Yesterday 6:30 PM"
        2026-10-12 08:00 -> "Mon 8:00 AM"
        2026-03-02 14:00 -> "Mar 2, 2:00 PM"
        2025-03-02 14:00 -> "Mar 2, 2025, 2:00 PM"
    """
    if not isinstance(value, datetime):
        return "Invalid date"

    if now is None:
        now = datetime.now(timezone.utc).astimezone()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if now.tzinfo is not None:
        value = value.astimezone(now.tzinfo)

    diff_days = (now.date() - value.date()).days
    time_label = _format_time(value)

    if diff_days == 0:
        return f"Today {time_label}"
    if diff_days == 1:
        return f"Yesterday {time_label}"
    if diff_days < 7:
        return f"{_WEEKDAYS[value.weekday()]} {time_label}"

    label = f"{_MONTHS[value.month - 1]} {value.day}"
    if value.year != now.year:
        label += f", {value.year}"
    return f"{label}, {time_label}"


def format_age(days: int) -> str:
    """Format a day count: Today, N day(s), N week(s), N month(s), N year(s).

    Months are 30 days and years 365 days.
    """
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    if days < 30:
        weeks = days // 7
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    if days < 365:
        months = days // 30
        return "1 month" if months == 1 else f"{months} months"
    years = days // 365
    return "1 year" if years == 1 else f"{years} years"


def truncate_text(text: Optional[str], max_length: int = 100) -> Optional[str]:
    """Cut text to at most max_length characters, ending in "..." when cut."""
    if not text or len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
