"""Relay filters for the calendar access patterns."""

from typing import Optional

from ..models.raw import Filter
from ..protocol.kinds import (
    CALENDAR_EVENT_KINDS,
    CALENDAR_KIND,
    DATE_BASED_KIND,
    RSVP_KIND,
    TIME_BASED_KIND,
)


def recent_filter(limit: int) -> Filter:
    return Filter(kinds=list(CALENDAR_EVENT_KINDS), limit=limit)


def upcoming_filters(limit: int, until: Optional[int] = None) -> tuple[Filter, Filter]:
    """
    Filters for one page of upcoming events.

    Time-based and date-based events are queried separately so each kind gets
    its own limit.

    Args:
        limit: Maximum events per kind
        until: Only events created at or before this Unix time

    Returns:
        (time-based filter, date-based filter)
    """
    return (
        Filter(kinds=[TIME_BASED_KIND], limit=limit, until=until),
        Filter(kinds=[DATE_BASED_KIND], limit=limit, until=until),
    )


def range_filters(limit: int) -> tuple[Filter, Filter]:
    return (
        Filter(kinds=[TIME_BASED_KIND], limit=limit),
        Filter(kinds=[DATE_BASED_KIND], limit=limit),
    )


def hashtag_filter(hashtag: str, limit: int) -> Filter:
    return Filter(kinds=list(CALENDAR_EVENT_KINDS), tags={"t": [hashtag]}, limit=limit)


def search_scan_filter(limit: int, min_scan: int) -> Filter:
    """Broad filter for client-side text search; fetches more than will be shown."""
    return Filter(kinds=list(CALENDAR_EVENT_KINDS), limit=max(limit * 2, min_scan))


def event_by_id_filter(event_id: str) -> Filter:
    return Filter(kinds=list(CALENDAR_EVENT_KINDS), ids=[event_id])


def rsvp_filter(coordinate: str, limit: int) -> Filter:
    return Filter(kinds=[RSVP_KIND], tags={"a": [coordinate]}, limit=limit)


def calendar_filter(author: str, identifier: str) -> Filter:
    return Filter(kinds=[CALENDAR_KIND], authors=[author], tags={"d": [identifier]})
