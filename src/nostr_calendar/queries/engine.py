"""Calendar query engine: relay queries turned into ordered calendar views."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from functools import cmp_to_key
from typing import Optional, Union

from ..config import QueryConfig, config, query_config
from ..models.calendar import Calendar, EventCoordinate
from ..models.event import CalendarEvent
from ..models.raw import Filter, RawEvent
from ..models.rsvp import CalendarEventRSVP
from ..protocol.codec import parse_calendar, parse_calendar_event, parse_calendar_rsvp
from ..protocol.validation import (
    calendar_error,
    calendar_event_error,
    calendar_event_rsvp_error,
)
from ..readers.base import EventSource
from ..utils.date_utils import date_string, now_timestamp, to_timestamp, today_in
from ..utils.exceptions import QueryTimeoutError
from . import filters
from .ordering import (
    compare_by_start,
    compare_upcoming,
    is_upcoming,
    matches_text,
    overlaps_range,
)

logger = logging.getLogger(__name__)


@dataclass
class EventPage:
    """One page of upcoming events."""

    events: list[CalendarEvent] = field(default_factory=list)
    # Pass as ``until`` to get the next page; None once the source is exhausted.
    # A page may be empty while more pages follow (all its events were past).
    next_cursor: Optional[int] = None


def _page_boundary(batches: Sequence[Sequence[RawEvent]], limit: int) -> Optional[int]:
    """Newest of the oldest creation times among batches that hit the limit."""
    oldest = [min(raw.created_at for raw in batch) for batch in batches if batch and len(batch) >= limit]
    return max(oldest) if oldest else None


def _split_page(
    batches: Sequence[Sequence[RawEvent]],
    limit: int,
    until: Optional[int],
) -> tuple[list[RawEvent], Optional[int]]:
    """Pick the raw events belonging to one page and the cursor for the next."""
    fetched = [raw for batch in batches for raw in batch]
    boundary = _page_boundary(batches, limit)
    if boundary is None:
        if not fetched:
            return [], None
        return fetched, min(raw.created_at for raw in fetched) - 1

    if until is not None and boundary >= until:
        # A full batch sharing one creation time cannot be split by cursor.
        page = [raw for raw in fetched if raw.created_at >= boundary]
        return page, boundary - 1

    # Events at the boundary may continue past a full batch; the next page
    # starts there.
    return [raw for raw in fetched if raw.created_at > boundary], boundary


class CalendarQueryEngine:
    """Run the calendar access patterns against an event source."""

    def __init__(
        self,
        source: EventSource,
        timeout: Optional[float] = None,
        timezone: Optional[str] = None,
        limits: Optional[QueryConfig] = None,
        clock: Callable[[], int] = now_timestamp,
    ):
        """
        Initialize the query engine.

        Args:
            source: Event source used for every query
            timeout: Per-query timeout in seconds (defaults to config)
            timezone: Observer timezone for "today" and date starts (defaults to config)
            limits: Default result sizes (defaults to calendar_config.yaml)
            clock: Returns the current Unix time
        """
        self.source = source
        self.timeout = timeout if timeout is not None else config.query_timeout
        self.timezone = timezone or config.timezone
        self.limits = limits or query_config
        self.clock = clock

    async def _query_all(self, *filter_groups: Sequence[Filter]) -> list[list[RawEvent]]:
        """Run queries concurrently; when one fails the others are cancelled."""
        tasks = [asyncio.ensure_future(self._query(group)) for group in filter_groups]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _query(self, query_filters: Sequence[Filter]) -> list[RawEvent]:
        """Run one source query under the timeout; cancellation propagates."""
        try:
            events = await asyncio.wait_for(
                self.source.query(list(query_filters)), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise QueryTimeoutError(
                f"Query timed out after {self.timeout}s: "
                f"{[f.to_wire() for f in query_filters]}"
            ) from e
        logger.debug(f"Query returned {len(events)} events")
        return events

    def _parse_events(self, raw_events: Iterable[RawEvent]) -> list[CalendarEvent]:
        """Validate and parse, dropping anything that fails."""
        parsed = []
        for raw in raw_events:
            error = calendar_event_error(raw)
            if error:
                logger.debug(f"Dropping event {raw.id}: {error}")
                continue
            event = parse_calendar_event(raw)
            if event is None:
                logger.debug(f"Dropping event {raw.id}: could not be parsed")
                continue
            parsed.append(event)
        return parsed

    async def recent(self, limit: Optional[int] = None) -> list[CalendarEvent]:
        """
        Fetch recent calendar events ordered by start.

        Args:
            limit: Maximum number of events requested from the source

        Returns:
            Valid events, earliest start first
        """
        limit = limit or self.limits.recent_limit
        raw_events = await self._query([filters.recent_filter(limit)])
        events = self._parse_events(raw_events)
        events.sort(key=cmp_to_key(compare_by_start))
        logger.info(f"Found {len(events)} recent calendar events")
        return events

    async def upcoming(
        self,
        limit: Optional[int] = None,
        until: Optional[int] = None,
    ) -> EventPage:
        """
        Fetch one page of events that have not started yet.

        Args:
            limit: Maximum events per kind requested from the source
            until: Cursor from the previous page (creation-time upper bound)

        Returns:
            EventPage ordered by start, with the cursor for the next page
        """
        limit = limit or self.limits.upcoming_limit
        time_filter, date_filter = filters.upcoming_filters(limit, until)
        batches = await self._query_all([time_filter], [date_filter])

        # A full batch may have more events at or below its oldest creation
        # time, so the page only covers times every full batch got past.
        fetched, next_cursor = _split_page(batches, limit, until)

        now = self.clock()
        today = today_in(now, self.timezone)
        events = [event for event in self._parse_events(fetched) if is_upcoming(event, now, today)]
        events.sort(key=cmp_to_key(lambda a, b: compare_upcoming(a, b, self.timezone)))

        logger.debug(f"Upcoming page: {len(events)} events, next cursor {next_cursor}")
        return EventPage(events=events, next_cursor=next_cursor)

    async def by_date_range(
        self,
        start: datetime,
        end: datetime,
    ) -> list[CalendarEvent]:
        """
        Fetch events overlapping a date range.

        Args:
            start: Range start (naive values are taken as UTC)
            end: Range end, inclusive

        Returns:
            Events overlapping the range, in source order
        """
        start_time, end_time = to_timestamp(start), to_timestamp(end)
        start_date, end_date = date_string(start), date_string(end)

        time_filter, date_filter = filters.range_filters(self.limits.range_limit)
        time_based, date_based = await self._query_all([time_filter], [date_filter])

        events = [
            event
            for event in self._parse_events([*time_based, *date_based])
            if overlaps_range(event, start_time, end_time, start_date, end_date)
        ]
        logger.info(f"Found {len(events)} events between {start_date} and {end_date}")
        return events

    async def search(self, query: str, limit: Optional[int] = None) -> list[CalendarEvent]:
        """
        Search events by hashtag and free text.

        A query starting with "#" also asks the source for that hashtag. Free
        text is matched client-side against a larger scan of recent events.

        Args:
            query: Search text
            limit: Requested number of results

        Returns:
            Matching events, hashtag matches first, each id at most once
        """
        needle = query.strip().lower()
        if not needle:
            return []
        limit = limit or self.limits.search_limit

        scan_filter = filters.search_scan_filter(limit, self.limits.search_min_scan)
        if needle.startswith("#"):
            hashtag_raw, scan_raw = await self._query_all(
                [filters.hashtag_filter(needle[1:], limit)],
                [scan_filter],
            )
        else:
            hashtag_raw, scan_raw = [], await self._query([scan_filter])

        hashtag_events = self._parse_events(hashtag_raw)
        text_events = [e for e in self._parse_events(scan_raw) if matches_text(e, needle)]

        unique: dict[str, CalendarEvent] = {}
        for event in [*hashtag_events, *text_events]:
            unique.setdefault(event.id, event)
        logger.info(f"Search '{needle}' matched {len(unique)} events")
        return list(unique.values())

    async def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        """
        Fetch a single calendar event by id.

        Args:
            event_id: Event id

        Returns:
            The event, or None if missing or invalid
        """
        if not event_id:
            return None
        raw_events = await self._query([filters.event_by_id_filter(event_id)])
        events = self._parse_events(e for e in raw_events if e.id == event_id)
        return events[0] if events else None

    async def rsvps_for_event(
        self,
        coordinate: Union[str, EventCoordinate],
        limit: int = 100,
    ) -> list[CalendarEventRSVP]:
        """
        Fetch RSVPs that reference an event.

        Args:
            coordinate: Event coordinate
            limit: Maximum number of RSVPs requested

        Returns:
            Valid RSVPs; several from the same author are all kept
        """
        raw_events = await self._query([filters.rsvp_filter(str(coordinate), limit)])
        rsvps = []
        for raw in raw_events:
            error = calendar_event_rsvp_error(raw)
            if error:
                logger.debug(f"Dropping RSVP {raw.id}: {error}")
                continue
            rsvp = parse_calendar_rsvp(raw)
            if rsvp is not None:
                rsvps.append(rsvp)
        return rsvps

    async def get_calendar(self, author: str, identifier: str) -> Optional[Calendar]:
        """
        Fetch the latest version of a calendar.

        Args:
            author: Calendar author public key
            identifier: Calendar "d" identifier

        Returns:
            Newest valid calendar for (author, identifier), or None
        """
        raw_events = await self._query([filters.calendar_filter(author, identifier)])
        calendars = []
        for raw in raw_events:
            error = calendar_error(raw)
            if error:
                logger.debug(f"Dropping calendar {raw.id}: {error}")
                continue
            calendar = parse_calendar(raw)
            if calendar is not None:
                calendars.append(calendar)
        if not calendars:
            return None
        return max(calendars, key=lambda c: c.created_at)
