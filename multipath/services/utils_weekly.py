# multipath/services/utils_weekly.py
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from multipath.settings.config import settings

logger = logging.getLogger(__name__)


def pick_tz(name: str | None) -> tzinfo | None:
    """Resolve an IANA zone name; None means "use the host's local zone"."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %r; falling back to the host zone", name)
        return None


def default_tz() -> tzinfo | None:
    return pick_tz(settings.APP_TZ)


def to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    # naive datetimes are taken as local wall time in the target zone
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz) if tz else dt.astimezone()
    return dt.astimezone(tz) if tz else dt.astimezone()


def parse_iso(value: str, tz: tzinfo | None = None) -> datetime:
    """Parse an ISO-8601 timestamp ("Z" suffix allowed) into an aware local datetime."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local(datetime.fromisoformat(text), tz)


def to_iso(dt: datetime) -> str:
    """UTC millisecond form, e.g. 2025-01-01T12:00:00.000Z."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    u = dt.astimezone(timezone.utc)
    return u.strftime("%Y-%m-%dT%H:%M:%S.") + f"{u.microsecond // 1000:03d}Z"


def local_date(dt: datetime, tz: tzinfo | None = None) -> date:
    return to_local(dt, tz).date()


def is_same_local_day(value: str, reference: datetime, tz: tzinfo | None = None) -> bool:
    return parse_iso(value, tz).date() == local_date(reference, tz)


def week_start_date(day: date, week_starts_on: int) -> date:
    # week_starts_on: 0 = Sunday, 1 = Monday; date.weekday() has Monday = 0
    sunday_based = (day.weekday() + 1) % 7
    return day - timedelta(days=(sunday_based - week_starts_on) % 7)


def get_week_interval(
    now: datetime, week_starts_on: int, tz: tzinfo | None = None
) -> tuple[datetime, datetime]:
    """Closed [start, end] of the local week containing ``now``.

    ``start`` is local midnight of the first day, ``end`` the last microsecond
    of the seventh day.
    """
    first = week_start_date(local_date(now, tz), week_starts_on)
    last = first + timedelta(days=6)
    start = to_local(datetime.combine(first, time.min), tz)
    end = to_local(datetime.combine(last, time.max), tz)
    return start, end


def in_interval(value: str, start: datetime, end: datetime, tz: tzinfo | None = None) -> bool:
    return start <= parse_iso(value, tz) <= end


def format_date(value: Optional[str], fallback: str = "—", tz: tzinfo | None = None) -> str:
    if not value:
        return fallback
    return parse_iso(value, tz).strftime("%Y-%m-%d")


def format_datetime(value: Optional[str], fallback: str = "—", tz: tzinfo | None = None) -> str:
    if not value:
        return fallback
    return parse_iso(value, tz).strftime("%Y-%m-%d %H:%M")
