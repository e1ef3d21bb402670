"""Date and time utilities for calendar queries."""

import time
from datetime import date, datetime
from typing import Union

import pytz


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime is in UTC.

    Args:
        dt: Datetime to convert

    Returns:
        UTC datetime
    """
    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def now_timestamp() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def to_timestamp(dt: datetime) -> int:
    """Unix seconds for a datetime (naive values are taken as UTC)."""
    return int(ensure_utc(dt).timestamp())


def timezone_for(name: str):
    """Resolve a timezone name to a pytz timezone."""
    return pytz.timezone(name)


def today_in(timestamp: int, tz_name: str = "UTC") -> str:
    """
    Calendar date of a Unix timestamp as seen in a timezone.

    Args:
        timestamp: Unix seconds
        tz_name: IANA timezone of the observer

    Returns:
        Date string in YYYY-MM-DD format
    """
    moment = datetime.fromtimestamp(timestamp, tz=pytz.utc)
    return moment.astimezone(timezone_for(tz_name)).date().isoformat()


def date_start_timestamp(value: Union[str, date], tz_name: str = "UTC") -> int:
    """
    Unix timestamp of midnight at the start of a calendar day.

    Args:
        value: Date or YYYY-MM-DD string
        tz_name: Timezone whose midnight is used

    Returns:
        Unix seconds

    Raises:
        ValueError: If the date string is not a valid calendar date
    """
    if isinstance(value, str):
        value = date.fromisoformat(value)
    tz = timezone_for(tz_name)
    midnight = tz.localize(datetime(value.year, value.month, value.day))
    return int(midnight.timestamp())


def date_string(dt: datetime) -> str:
    """YYYY-MM-DD of a datetime after conversion to UTC."""
    return ensure_utc(dt).date().isoformat()
