"""Ordering and matching rules for calendar event collections."""

from ..models.event import CalendarEvent, DateBasedCalendarEvent, TimeBasedCalendarEvent
from ..utils.date_utils import date_start_timestamp


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_by_start(a: CalendarEvent, b: CalendarEvent) -> int:
    """
    Order two events by start, for events of the same kind.

    Dates compare as strings and timestamps as numbers; a date-based and a
    time-based event fall back to creation time.
    """
    if type(a) is type(b):
        return _cmp(a.start, b.start)
    return _cmp(a.created_at, b.created_at)


def compare_upcoming(a: CalendarEvent, b: CalendarEvent, tz_name: str = "UTC") -> int:
    """
    Order two events by start, converting dates to timestamps across kinds.

    A date-based start counts as midnight of that day in ``tz_name``.
    """
    if type(a) is type(b):
        return _cmp(a.start, b.start)
    try:
        return _cmp(_start_timestamp(a, tz_name), _start_timestamp(b, tz_name))
    except ValueError:
        # "2025-02-30" passes the format check but is not a real day
        return _cmp(a.created_at, b.created_at)


def _start_timestamp(event: CalendarEvent, tz_name: str) -> int:
    if isinstance(event, DateBasedCalendarEvent):
        return date_start_timestamp(event.start, tz_name)
    return event.start


def is_upcoming(event: CalendarEvent, now: int, today: str) -> bool:
    """Time-based events must start after ``now``; date-based ones today or later."""
    if isinstance(event, TimeBasedCalendarEvent):
        return event.start > now
    return event.start >= today


def overlaps_range(
    event: CalendarEvent,
    start_time: int,
    end_time: int,
    start_date: str,
    end_date: str,
) -> bool:
    """
    Check whether an event falls inside an inclusive range.

    Events with an end occupy [start, end) and are kept when that interval
    meets the range; events without one are points at their start. Dates use
    the same test on YYYY-MM-DD strings.
    """
    if isinstance(event, TimeBasedCalendarEvent):
        lower, upper = start_time, end_time
    else:
        lower, upper = start_date, end_date

    if event.end is not None:
        return event.start <= upper and event.end > lower
    return lower <= event.start <= upper


def matches_text(event: CalendarEvent, needle: str) -> bool:
    """Case-insensitive substring match on title, content, summary and locations."""
    needle = needle.lower()
    if needle in event.title.lower():
        return True
    if needle in event.content.lower():
        return True
    if event.summary and needle in event.summary.lower():
        return True
    return any(needle in location.lower() for location in event.locations)
