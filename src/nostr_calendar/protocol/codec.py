"""Mapping between raw NIP-52 events and calendar domain models."""

import logging
from typing import Optional

from ..models.calendar import Calendar, CalendarEventRef, EventCoordinate
from ..models.event import CalendarEvent, DateBasedCalendarEvent, Participant, TimeBasedCalendarEvent
from ..models.raw import RawEvent, Tag, UnsignedEvent
from ..models.rsvp import CalendarEventRSVP, FreeBusy, RSVPStatus
from .kinds import CALENDAR_EVENT_KINDS, CALENDAR_KIND, DATE_BASED_KIND, RSVP_KIND
from .tags import all_values, find_tag, find_tags, first_value, tag_extra
from .validation import parse_int

logger = logging.getLogger(__name__)


def _participants(event: RawEvent) -> tuple[Participant, ...]:
    return tuple(
        Participant(pubkey=tag[1], relay_url=tag_extra(tag, 2), role=tag_extra(tag, 3))
        for tag in find_tags(event.tags, "p")
        if len(tag) > 1
    )


def parse_calendar_event(event: RawEvent) -> Optional[CalendarEvent]:
    """
    Convert a raw event to a date-based or time-based calendar event.

    Only the minimal field contract is enforced here; run the validator first
    for the full NIP-52 rules. For time-based events an unparsable start drops
    the event, while an unparsable end is dropped on its own.

    Args:
        event: Raw kind 31922/31923 event

    Returns:
        Parsed event, or None if it cannot be parsed
    """
    if event.kind not in CALENDAR_EVENT_KINDS:
        return None

    tags = event.tags
    d = first_value(tags, "d")
    title = first_value(tags, "title")
    start = first_value(tags, "start")
    if not d or not title or not start:
        return None

    base = dict(
        id=event.id,
        pubkey=event.pubkey,
        created_at=event.created_at,
        content=event.content,
        d=d,
        title=title,
        summary=first_value(tags, "summary") or None,
        image=first_value(tags, "image") or None,
        geohash=first_value(tags, "g") or None,
        locations=tuple(all_values(tags, "location")),
        participants=_participants(event),
        hashtags=tuple(all_values(tags, "t")),
        references=tuple(all_values(tags, "r")),
        calendar_refs=tuple(all_values(tags, "a")),
    )

    if event.kind == DATE_BASED_KIND:
        return DateBasedCalendarEvent(
            **base,
            start=start,
            end=first_value(tags, "end") or None,
        )

    start_time = parse_int(start)
    if start_time is None:
        logger.debug(f"Dropping event {event.id}: unparsable start '{start}'")
        return None

    end_time = parse_int(first_value(tags, "end"))
    return TimeBasedCalendarEvent(
        **base,
        start=start_time,
        end=end_time or None,
        start_tzid=first_value(tags, "start_tzid") or None,
        end_tzid=first_value(tags, "end_tzid") or None,
    )


def _participant_tag(participant: Participant) -> Tag:
    tag = ["p", participant.pubkey]
    if participant.relay_url or participant.role:
        tag.append(participant.relay_url or "")
    if participant.role:
        tag.append(participant.role)
    return tuple(tag)


def serialize_calendar_event(event: CalendarEvent) -> UnsignedEvent:
    """
    Build the wire form of a calendar event.

    Tag order: d, title, summary, image, locations, g, p, t, r, a, then the
    kind-specific start/end (and tzid) tags.

    Args:
        event: Date-based or time-based calendar event

    Returns:
        UnsignedEvent with kind, content and tags
    """
    tags: list[Tag] = [("d", event.d), ("title", event.title)]

    if event.summary:
        tags.append(("summary", event.summary))
    if event.image:
        tags.append(("image", event.image))
    tags.extend(("location", location) for location in event.locations)
    if event.geohash:
        tags.append(("g", event.geohash))
    tags.extend(_participant_tag(p) for p in event.participants)
    tags.extend(("t", hashtag) for hashtag in event.hashtags)
    tags.extend(("r", reference) for reference in event.references)
    tags.extend(("a", calendar_ref) for calendar_ref in event.calendar_refs)

    if isinstance(event, DateBasedCalendarEvent):
        tags.append(("start", event.start))
        if event.end:
            tags.append(("end", event.end))
    elif isinstance(event, TimeBasedCalendarEvent):
        tags.append(("start", str(event.start)))
        if event.end is not None:
            tags.append(("end", str(event.end)))
        if event.start_tzid:
            tags.append(("start_tzid", event.start_tzid))
        if event.end_tzid:
            tags.append(("end_tzid", event.end_tzid))
    else:
        raise TypeError(f"Not a calendar event: {type(event).__name__}")

    return UnsignedEvent(kind=event.kind, content=event.content, tags=tuple(tags))


def parse_calendar(event: RawEvent) -> Optional[Calendar]:
    """
    Convert a raw kind 31924 event to a Calendar.

    "a" tags with malformed coordinates are skipped.
    """
    if event.kind != CALENDAR_KIND:
        return None

    d = first_value(event.tags, "d")
    title = first_value(event.tags, "title")
    if not d or not title:
        return None

    refs = []
    for tag in find_tags(event.tags, "a"):
        coordinate = EventCoordinate.parse(tag[1]) if len(tag) > 1 else None
        if coordinate is None:
            continue
        refs.append(
            CalendarEventRef(
                kind=coordinate.kind,
                pubkey=coordinate.pubkey,
                identifier=coordinate.identifier,
                relay_url=tag_extra(tag, 2),
            )
        )

    return Calendar(
        id=event.id,
        pubkey=event.pubkey,
        created_at=event.created_at,
        content=event.content,
        d=d,
        title=title,
        event_refs=tuple(refs),
    )


def serialize_calendar(calendar: Calendar) -> UnsignedEvent:
    """Build the wire form of a calendar: d, title, then one "a" tag per event."""
    tags: list[Tag] = [("d", calendar.d), ("title", calendar.title)]
    for ref in calendar.event_refs:
        if ref.relay_url:
            tags.append(("a", str(ref.coordinate), ref.relay_url))
        else:
            tags.append(("a", str(ref.coordinate)))
    return UnsignedEvent(kind=CALENDAR_KIND, content=calendar.content, tags=tuple(tags))


def parse_calendar_rsvp(event: RawEvent) -> Optional[CalendarEventRSVP]:
    """Convert a raw kind 31925 event to an RSVP, or None if it cannot be parsed."""
    if event.kind != RSVP_KIND:
        return None

    tags = event.tags
    d = first_value(tags, "d")
    status = first_value(tags, "status")
    a_tag = find_tag(tags, "a")
    if not d or a_tag is None or len(a_tag) < 2:
        return None

    try:
        rsvp_status = RSVPStatus(status)
        fb = first_value(tags, "fb")
        freebusy = FreeBusy(fb) if fb and rsvp_status != RSVPStatus.DECLINED else None
    except ValueError:
        return None

    return CalendarEventRSVP(
        id=event.id,
        pubkey=event.pubkey,
        created_at=event.created_at,
        content=event.content,
        d=d,
        event_coordinates=a_tag[1],
        status=rsvp_status,
        event_id=first_value(tags, "e") or None,
        freebusy=freebusy,
        author_pubkey=first_value(tags, "p") or None,
    )


def serialize_calendar_rsvp(rsvp: CalendarEventRSVP) -> UnsignedEvent:
    """
    Build the wire form of an RSVP.

    Tag order: a, d, status, e, fb, p. A free/busy value on a declined RSVP
    is left out.
    """
    status = RSVPStatus(rsvp.status)
    tags: list[Tag] = [
        ("a", rsvp.event_coordinates),
        ("d", rsvp.d),
        ("status", status.value),
    ]
    if rsvp.event_id:
        tags.append(("e", rsvp.event_id))
    if rsvp.freebusy and status != RSVPStatus.DECLINED:
        tags.append(("fb", FreeBusy(rsvp.freebusy).value))
    if rsvp.author_pubkey:
        tags.append(("p", rsvp.author_pubkey))
    return UnsignedEvent(kind=RSVP_KIND, content=rsvp.content, tags=tuple(tags))
