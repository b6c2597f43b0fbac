"""
Timezone-aware datetime utilities.

Stored timestamps are UTC; day boundaries and minute-of-day values are
computed in the user's local timezone.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from dayflow.utils.time_range import MINUTES_IN_DAY

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def get_user_today(user_timezone: str) -> date:
    """Get today's date in the user's timezone."""
    tz = ZoneInfo(user_timezone)
    return datetime.now(UTC).astimezone(tz).date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Args:
        dt: datetime to convert (can be None, naive, or timezone-aware)

    Returns:
        Optional[datetime]: UTC timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def day_bounds_utc(day: date, user_timezone: str) -> tuple[datetime, datetime]:
    """
    Get the UTC instants bounding a local calendar day.

    Returns:
        (start, end) where the day is the half-open interval [start, end)
    """
    tz = ZoneInfo(user_timezone)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def local_date(dt: datetime, user_timezone: str) -> date:
    """Calendar date of ``dt`` in the user's timezone."""
    return ensure_utc(dt).astimezone(ZoneInfo(user_timezone)).date()


def minute_of_day(dt: datetime, user_timezone: str) -> int:
    """Local minute-of-day (0-1439) of ``dt``."""
    local = ensure_utc(dt).astimezone(ZoneInfo(user_timezone))
    return local.hour * 60 + local.minute


def next_occurrence(
    minutes: int,
    user_timezone: str,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Next UTC instant at which the local clock reads ``minutes``.

    Today's occurrence is used while it is still ahead of ``now``,
    otherwise tomorrow's.
    """
    tz = ZoneInfo(user_timezone)
    reference = ensure_utc(now or now_utc()).astimezone(tz)
    minute_in_day = minutes % MINUTES_IN_DAY
    candidate = datetime.combine(
        reference.date(),
        time(minute_in_day // 60, minute_in_day % 60),
        tzinfo=tz,
    )
    if candidate <= reference:
        candidate = datetime.combine(
            reference.date() + timedelta(days=1),
            time(minute_in_day // 60, minute_in_day % 60),
            tzinfo=tz,
        )
    return candidate.astimezone(UTC)
