"""Structural validation of NIP-52 events.

Each ``*_error`` function returns the first rule an event breaks, or None
when it is valid. The ``is_valid_*`` predicates wrap them for callers that
only need a yes/no answer. None of these functions raise on malformed input.
"""

import re
from typing import Optional

from ..models.raw import RawEvent
from ..utils.timezones import is_valid_timezone
from .kinds import (
    CALENDAR_EVENT_KINDS,
    CALENDAR_KIND,
    DATE_BASED_KIND,
    DATE_PATTERN,
    FREEBUSY_VALUES,
    RSVP_KIND,
    RSVP_STATUSES,
    TIME_BASED_KIND,
)
from .tags import find_tag, first_value, has_tag

_DATE_RE = re.compile(DATE_PATTERN)
_INT_RE = re.compile(r"-?[0-9]+")


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a base-10 integer string, returning None if it is not one."""
    if value is None or not _INT_RE.fullmatch(value):
        return None
    return int(value)


def is_date_string(value: Optional[str]) -> bool:
    return value is not None and _DATE_RE.fullmatch(value) is not None


def calendar_event_error(event: RawEvent) -> Optional[str]:
    """
    Check a kind 31922/31923 event.

    Args:
        event: Raw event

    Returns:
        Description of the failed rule, or None if valid
    """
    if event.kind not in CALENDAR_EVENT_KINDS:
        return f"kind {event.kind} is not a calendar event kind"

    tags = event.tags
    for required in ("d", "title", "start"):
        if not first_value(tags, required):
            return f"missing required tag '{required}'"

    start = first_value(tags, "start")
    end = first_value(tags, "end")

    if event.kind == DATE_BASED_KIND:
        if not is_date_string(start):
            return f"start '{start}' is not a YYYY-MM-DD date"
        if end:
            if not is_date_string(end):
                return f"end '{end}' is not a YYYY-MM-DD date"
            if end <= start:
                return "end date is not after start date"

    elif event.kind == TIME_BASED_KIND:
        start_time = parse_int(start)
        if start_time is None or start_time <= 0:
            return f"start '{start}' is not a positive timestamp"
        if end:
            end_time = parse_int(end)
            if end_time is None or end_time <= 0:
                return f"end '{end}' is not a positive timestamp"
            if end_time <= start_time:
                return "end time is not after start time"

        for tz_tag in ("start_tzid", "end_tzid"):
            tzid = first_value(tags, tz_tag)
            if tzid and not is_valid_timezone(tzid):
                return f"unknown timezone '{tzid}' in '{tz_tag}'"

    return None


def calendar_error(event: RawEvent) -> Optional[str]:
    """Check a kind 31924 calendar."""
    if event.kind != CALENDAR_KIND:
        return f"kind {event.kind} is not a calendar"
    for required in ("d", "title"):
        if not first_value(event.tags, required):
            return f"missing required tag '{required}'"
    return None


def calendar_event_rsvp_error(event: RawEvent) -> Optional[str]:
    """Check a kind 31925 RSVP."""
    if event.kind != RSVP_KIND:
        return f"kind {event.kind} is not an RSVP"

    tags = event.tags
    status = first_value(tags, "status")
    a_tag = find_tag(tags, "a")
    if not first_value(tags, "d"):
        return "missing required tag 'd'"
    if not status:
        return "missing required tag 'status'"
    if a_tag is None:
        return "missing required tag 'a'"

    if status not in RSVP_STATUSES:
        return f"unknown status '{status}'"

    if status == "declined" and has_tag(tags, "fb"):
        return "declined RSVP carries a free/busy tag"

    freebusy = first_value(tags, "fb")
    if freebusy and freebusy not in FREEBUSY_VALUES:
        return f"unknown free/busy value '{freebusy}'"

    coordinates = a_tag[1] if len(a_tag) > 1 else ""
    parts = coordinates.split(":")
    if len(parts) < 3:
        return f"malformed event coordinates '{coordinates}'"
    if parse_int(parts[0]) not in CALENDAR_EVENT_KINDS:
        return f"coordinates do not point at a calendar event: '{coordinates}'"

    return None


def is_valid_calendar_event(event: RawEvent) -> bool:
    return calendar_event_error(event) is None


def is_valid_calendar(event: RawEvent) -> bool:
    return calendar_error(event) is None


def is_valid_calendar_event_rsvp(event: RawEvent) -> bool:
    return calendar_event_rsvp_error(event) is None
