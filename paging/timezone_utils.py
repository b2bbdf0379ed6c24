"""
Timezone utilities for the paging core.

Page boundaries are local midnights. Naive datetimes are treated as local
wall-clock time; aware datetimes are converted to the configured local
timezone before their calendar date is taken.
"""

from datetime import datetime, date, time as dt_time
import time as _time
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "Europe/Amsterdam"


def set_timezone(timezone_name: str):
    """Set the local timezone for the application."""
    global _local_timezone_name
    _local_timezone_name = timezone_name


def get_timezone_name() -> str:
    return _local_timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Returns:
        pytz timezone object for the configured local timezone.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fall back to the system offset
        if _time.localtime().tm_isdst:
            offset_seconds = -_time.altzone
        else:
            offset_seconds = -_time.timezone
        return pytz.FixedOffset(offset_seconds // 60)


def to_local_datetime(dt: datetime) -> datetime:
    """
    Convert an aware datetime to the local timezone.

    Naive datetimes are already local wall-clock time and are returned unchanged.
    """
    if dt.tzinfo is not None:
        return dt.astimezone(get_local_timezone())
    return dt


def local_date(dt: datetime) -> date:
    """Calendar date of dt in local time."""
    return to_local_datetime(dt).date()


def local_midnight(d: date, aware: bool) -> datetime:
    """
    Start of the local day d.

    Args:
        d: The calendar date.
        aware: If True, return a datetime localized to the local timezone
            (DST-correct); otherwise a naive wall-clock datetime.
    """
    naive = datetime.combine(d, dt_time.min)
    if aware:
        return get_local_timezone().localize(naive)
    return naive


def minutes_since_midnight(dt: datetime) -> float:
    """Wall-clock minutes elapsed since the start of dt's local day."""
    local_dt = to_local_datetime(dt)
    return local_dt.hour * 60 + local_dt.minute + local_dt.second / 60.0


def utc_to_local_naive(dt: datetime) -> datetime:
    """
    Convert an aware datetime to a naive local datetime.

    Naive input is returned unchanged.
    """
    if dt.tzinfo is not None:
        return to_local_datetime(dt).replace(tzinfo=None)
    return dt


def local_naive_to_aware(dt: datetime) -> datetime:
    """
    Localize a naive local datetime.

    Aware input is converted to the local timezone.
    """
    if dt.tzinfo is None:
        return get_local_timezone().localize(dt)
    return to_local_datetime(dt)
