"""
Date utility functions for stored timestamps and calendar windows
"""
from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from app.core.config import settings

# Fixed width, so string order equals time order inside the document store
STORED_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_zone() -> tzinfo:
    if settings.TIMEZONE.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(settings.TIMEZONE)


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_stored(value: datetime) -> str:
    return to_utc(value).strftime(STORED_FORMAT)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (with 'Z' or an offset) into an aware UTC datetime

    Returns:
        None for empty input; raises ValueError for anything unparsable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)

    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(text))


def get_year_bounds(year: int) -> Tuple[datetime, datetime]:
    """
    Calendar year window [Jan 1 00:00, next Jan 1 00:00) in the configured zone

    Returns:
        Tuple of aware UTC datetimes (start inclusive, end exclusive)
    """
    zone = local_zone()
    start = datetime(year, 1, 1, tzinfo=zone)
    end = datetime(year + 1, 1, 1, tzinfo=zone)
    return to_utc(start), to_utc(end)


def get_current_month_start(now: Optional[datetime] = None) -> datetime:
    """
    Start of the current calendar month in the configured zone, as UTC
    """
    zone = local_zone()
    local_now = (now or utcnow()).astimezone(zone)
    start = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return to_utc(start)
