"""Authoring of calendar events and RSVPs."""

import logging
from collections.abc import Sequence
from typing import Optional, Union

from ..models.calendar import EventCoordinate
from ..models.event import DateBasedCalendarEvent, Participant, TimeBasedCalendarEvent
from ..models.raw import RawEvent, UnsignedEvent
from ..models.rsvp import CalendarEventRSVP, FreeBusy, RSVPStatus
from ..protocol.codec import serialize_calendar_event, serialize_calendar_rsvp
from ..protocol.kinds import CALENDAR_EVENT_KINDS
from ..protocol.validation import is_date_string
from ..utils.exceptions import AuthoringError, EventPublishError
from ..utils.identifiers import generate_identifier
from ..utils.timezones import is_valid_timezone
from ..writers.base import EventPublisher

logger = logging.getLogger(__name__)


class CalendarPublisher:
    """Build and publish calendar events and RSVPs."""

    def __init__(self, publisher: Optional[EventPublisher] = None):
        """
        Initialize the publisher.

        Args:
            publisher: Signs and submits events; only needed for publish_* methods
        """
        self.publisher = publisher

    def build_date_event(
        self,
        title: str,
        start: str,
        end: Optional[str] = None,
        content: str = "",
        summary: Optional[str] = None,
        image: Optional[str] = None,
        locations: Sequence[str] = (),
        hashtags: Sequence[str] = (),
        references: Sequence[str] = (),
        calendar_refs: Sequence[str] = (),
        participants: Sequence[Participant] = (),
        identifier: Optional[str] = None,
    ) -> UnsignedEvent:
        """
        Build a new all-day event (kind 31922).

        Args:
            title: Event title
            start: First day, YYYY-MM-DD
            end: Day after the last day, YYYY-MM-DD
            identifier: "d" value; a random one is generated if omitted

        Returns:
            UnsignedEvent ready for signing

        Raises:
            AuthoringError: If the title or dates are invalid
        """
        if not title:
            raise AuthoringError("Title is required")
        if not is_date_string(start):
            raise AuthoringError("Invalid start date format. Use YYYY-MM-DD")
        if end and not is_date_string(end):
            raise AuthoringError("Invalid end date format. Use YYYY-MM-DD")
        if end and end <= start:
            raise AuthoringError("End date must be after start date")

        event = DateBasedCalendarEvent(
            d=identifier or generate_identifier(),
            title=title,
            start=start,
            end=end or None,
            content=content,
            summary=summary,
            image=image,
            locations=tuple(locations),
            hashtags=tuple(hashtags),
            references=tuple(references),
            calendar_refs=tuple(calendar_refs),
            participants=tuple(participants),
        )
        return serialize_calendar_event(event)

    def build_time_event(
        self,
        title: str,
        start: int,
        end: Optional[int] = None,
        content: str = "",
        summary: Optional[str] = None,
        image: Optional[str] = None,
        start_tzid: Optional[str] = None,
        end_tzid: Optional[str] = None,
        locations: Sequence[str] = (),
        hashtags: Sequence[str] = (),
        references: Sequence[str] = (),
        calendar_refs: Sequence[str] = (),
        participants: Sequence[Participant] = (),
        identifier: Optional[str] = None,
    ) -> UnsignedEvent:
        """
        Build a new timed event (kind 31923).

        Args:
            title: Event title
            start: Start in Unix seconds
            end: End in Unix seconds, after start
            start_tzid: IANA timezone of the start
            end_tzid: IANA timezone of the end
            identifier: "d" value; a random one is generated if omitted

        Returns:
            UnsignedEvent ready for signing

        Raises:
            AuthoringError: If the title, times or timezones are invalid
        """
        if not title:
            raise AuthoringError("Title is required")
        if isinstance(start, bool) or not isinstance(start, int) or start <= 0:
            raise AuthoringError("Invalid start timestamp")
        if end is not None and (isinstance(end, bool) or not isinstance(end, int) or end <= start):
            raise AuthoringError("End time must be after start time")
        if start_tzid and not is_valid_timezone(start_tzid):
            raise AuthoringError(f"Invalid start timezone: {start_tzid}")
        if end_tzid and not is_valid_timezone(end_tzid):
            raise AuthoringError(f"Invalid end timezone: {end_tzid}")

        event = TimeBasedCalendarEvent(
            d=identifier or generate_identifier(),
            title=title,
            start=start,
            end=end,
            start_tzid=start_tzid or None,
            end_tzid=end_tzid or None,
            content=content,
            summary=summary,
            image=image,
            locations=tuple(locations),
            hashtags=tuple(hashtags),
            references=tuple(references),
            calendar_refs=tuple(calendar_refs),
            participants=tuple(participants),
        )
        return serialize_calendar_event(event)

    def build_rsvp(
        self,
        event_coordinates: Union[str, EventCoordinate],
        status: Union[str, RSVPStatus],
        freebusy: Optional[Union[str, FreeBusy]] = None,
        note: str = "",
        event_id: Optional[str] = None,
        author_pubkey: Optional[str] = None,
        identifier: Optional[str] = None,
    ) -> UnsignedEvent:
        """
        Build an RSVP (kind 31925) to a calendar event.

        Args:
            event_coordinates: Coordinate of the event being answered
            status: accepted, declined or tentative
            freebusy: free or busy; must be omitted when declining
            note: Free-text content
            event_id: Id of the specific event version
            author_pubkey: Author of the calendar event
            identifier: "d" value; a random one is generated if omitted

        Returns:
            UnsignedEvent ready for signing

        Raises:
            AuthoringError: If the status, free/busy value or coordinates are invalid
        """
        try:
            rsvp_status = RSVPStatus(status)
        except ValueError as e:
            raise AuthoringError(f"Invalid RSVP status: {status}") from e
        try:
            fb = FreeBusy(freebusy) if freebusy else None
        except ValueError as e:
            raise AuthoringError(f"Invalid free/busy value: {freebusy}") from e

        if rsvp_status == RSVPStatus.DECLINED and fb is not None:
            raise AuthoringError("Free/busy status cannot be set when declining an event")

        coordinate = EventCoordinate.parse(str(event_coordinates))
        if coordinate is None or coordinate.kind not in CALENDAR_EVENT_KINDS:
            raise AuthoringError(f"Invalid event coordinates: {event_coordinates}")

        rsvp = CalendarEventRSVP(
            d=identifier or generate_identifier(),
            event_coordinates=str(coordinate),
            status=rsvp_status,
            freebusy=fb,
            content=note,
            event_id=event_id,
            author_pubkey=author_pubkey or None,
        )
        return serialize_calendar_rsvp(rsvp)

    async def _publish(self, event: UnsignedEvent) -> RawEvent:
        if self.publisher is None:
            raise AuthoringError("No publisher configured")
        try:
            published = await self.publisher.publish(event)
        except EventPublishError:
            raise
        except Exception as e:
            raise EventPublishError(f"Failed to publish kind {event.kind} event: {e}") from e
        logger.info(f"Published kind {published.kind} event {published.id}")
        return published

    async def publish_date_event(self, title: str, start: str, **kwargs) -> RawEvent:
        """Build and publish an all-day event. See build_date_event."""
        return await self._publish(self.build_date_event(title, start, **kwargs))

    async def publish_time_event(self, title: str, start: int, **kwargs) -> RawEvent:
        """Build and publish a timed event. See build_time_event."""
        return await self._publish(self.build_time_event(title, start, **kwargs))

    async def publish_rsvp(
        self,
        event_coordinates: Union[str, EventCoordinate],
        status: Union[str, RSVPStatus],
        **kwargs,
    ) -> RawEvent:
        """Build and publish an RSVP. See build_rsvp."""
        return await self._publish(self.build_rsvp(event_coordinates, status, **kwargs))
