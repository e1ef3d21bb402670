"""CLI entry point for the Nostr calendar client."""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytz

from .config import config
from .models.event import DateBasedCalendarEvent, Participant
from .protocol.kinds import CALENDAR_KIND, RSVP_KIND
from .protocol.validation import (
    calendar_error,
    calendar_event_error,
    calendar_event_rsvp_error,
)
from .publishing.service import CalendarPublisher
from .queries.engine import CalendarQueryEngine
from .readers.memory_reader import InMemoryEventSource
from .utils.exceptions import NostrCalendarError
from .utils.logging import setup_logging


def _format_when(event) -> str:
    """Human-readable start/end of an event."""
    if isinstance(event, DateBasedCalendarEvent):
        return f"{event.start} to {event.end}" if event.end else event.start

    def fmt(timestamp: int, tzid: Optional[str]) -> str:
        tz = pytz.timezone(tzid) if tzid else pytz.utc
        return datetime.fromtimestamp(timestamp, tz=tz).strftime("%Y-%m-%d %H:%M %Z")

    start = fmt(event.start, event.start_tzid)
    if event.end is None:
        return start
    return f"{start} to {fmt(event.end, event.end_tzid or event.start_tzid)}"


def _print_events(events: list) -> None:
    print(f"Found {len(events)} event(s):")
    for event in events:
        print(f"  - {event.title}")
        print(f"    When: {_format_when(event)}")
        if event.locations:
            print(f"    Location: {', '.join(event.locations)}")
        if event.hashtags:
            print(f"    Tags: {' '.join('#' + t for t in event.hashtags)}")
        print(f"    ID: {event.id}")
        print()


def _parse_day(value: str, end_of_day: bool = False) -> datetime:
    """Parse YYYY-MM-DD as a UTC datetime at the start (or end) of that day."""
    day = datetime.strptime(value, "%Y-%m-%d")
    if end_of_day:
        day = day.replace(hour=23, minute=59, second=59)
    return pytz.utc.localize(day)


def _parse_participant(value: str) -> Participant:
    """Parse "pubkey[,relay[,role]]"."""
    parts = value.split(",")
    return Participant(
        pubkey=parts[0],
        relay_url=parts[1] if len(parts) > 1 and parts[1] else None,
        role=parts[2] if len(parts) > 2 and parts[2] else None,
    )


def _validate(source: InMemoryEventSource) -> int:
    """Report the validity of every event in the source."""
    invalid = 0
    events = source.all_events()
    for event in events:
        if event.kind == CALENDAR_KIND:
            error = calendar_error(event)
        elif event.kind == RSVP_KIND:
            error = calendar_event_rsvp_error(event)
        else:
            error = calendar_event_error(event)
        if error:
            invalid += 1
            print(f"  ✗ {event.id}: {error}")
        else:
            print(f"  ✓ {event.id}")
    print(f"\n{len(events) - invalid} valid, {invalid} invalid")
    return 1 if invalid else 0


def _add_common_event_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title", required=True, help="Event title")
    parser.add_argument("--content", default="", help="Event description")
    parser.add_argument("--summary", help="Short summary")
    parser.add_argument("--image", help="Image URL")
    parser.add_argument("--location", action="append", default=[], help="Location (repeatable)")
    parser.add_argument("--hashtag", action="append", default=[], help="Hashtag (repeatable)")
    parser.add_argument("--reference", action="append", default=[], help="Reference URL (repeatable)")
    parser.add_argument(
        "--calendar", action="append", default=[], help="Calendar coordinate (repeatable)"
    )
    parser.add_argument(
        "--participant",
        action="append",
        default=[],
        help="Participant as pubkey[,relay[,role]] (repeatable)",
    )
    parser.add_argument("--identifier", help="d identifier (random if omitted)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Nostr Calendar - browse, search and author NIP-52 calendar events"
    )
    parser.add_argument(
        "--events",
        type=Path,
        help="JSON or JSON-lines file of raw events to query",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    commands = parser.add_subparsers(dest="command")

    commands.add_parser("validate", help="Check every event in the file")

    recent = commands.add_parser("recent", help="List recent events")
    recent.add_argument("--limit", type=int, default=None)

    upcoming = commands.add_parser("upcoming", help="List upcoming events")
    upcoming.add_argument("--limit", type=int, default=None)
    upcoming.add_argument("--until", type=int, default=None, help="Page cursor")

    date_range = commands.add_parser("range", help="List events in a date range")
    date_range.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    date_range.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")

    search = commands.add_parser("search", help="Search events by text or #hashtag")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)

    show = commands.add_parser("show", help="Show one event by id")
    show.add_argument("event_id")

    date_event = commands.add_parser("new-date-event", help="Build an all-day event")
    _add_common_event_args(date_event)
    date_event.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    date_event.add_argument("--end", help="End date, exclusive (YYYY-MM-DD)")

    time_event = commands.add_parser("new-time-event", help="Build a timed event")
    _add_common_event_args(time_event)
    time_event.add_argument("--start", type=int, required=True, help="Start (Unix seconds)")
    time_event.add_argument("--end", type=int, help="End (Unix seconds)")
    time_event.add_argument("--start-tzid", help="IANA timezone of the start")
    time_event.add_argument("--end-tzid", help="IANA timezone of the end")

    rsvp = commands.add_parser("rsvp", help="Build an RSVP")
    rsvp.add_argument("coordinates", help="Event coordinates (kind:pubkey:identifier)")
    rsvp.add_argument("--status", required=True, choices=["accepted", "declined", "tentative"])
    rsvp.add_argument("--freebusy", choices=["free", "busy"])
    rsvp.add_argument("--note", default="")
    rsvp.add_argument("--event-id")
    rsvp.add_argument("--author")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = "DEBUG" if args.verbose else config.log_level
    logger = setup_logging(level=log_level, log_file=config.log_file)

    try:
        publisher = CalendarPublisher()

        # Authoring commands print the unsigned event for an external signer
        if args.command in ("new-date-event", "new-time-event"):
            common = dict(
                content=args.content,
                summary=args.summary,
                image=args.image,
                locations=args.location,
                hashtags=args.hashtag,
                references=args.reference,
                calendar_refs=args.calendar,
                participants=[_parse_participant(p) for p in args.participant],
                identifier=args.identifier,
            )
            if args.command == "new-date-event":
                event = publisher.build_date_event(args.title, args.start, end=args.end, **common)
            else:
                event = publisher.build_time_event(
                    args.title,
                    args.start,
                    end=args.end,
                    start_tzid=args.start_tzid,
                    end_tzid=args.end_tzid,
                    **common,
                )
            print(json.dumps(event.to_wire(), indent=2, ensure_ascii=False))
            return 0

        if args.command == "rsvp":
            event = publisher.build_rsvp(
                args.coordinates,
                args.status,
                freebusy=args.freebusy,
                note=args.note,
                event_id=args.event_id,
                author_pubkey=args.author,
            )
            print(json.dumps(event.to_wire(), indent=2, ensure_ascii=False))
            return 0

        if args.command is None:
            parser.print_help()
            return 0

        if not args.events:
            logger.error("--events is required for query commands")
            return 1

        source = InMemoryEventSource.from_file(args.events)

        if args.command == "validate":
            return _validate(source)

        engine = CalendarQueryEngine(source)

        if args.command == "recent":
            _print_events(asyncio.run(engine.recent(args.limit)))
        elif args.command == "upcoming":
            page = asyncio.run(engine.upcoming(args.limit, until=args.until))
            _print_events(page.events)
            if page.next_cursor is not None:
                print(f"Next page: --until {page.next_cursor}")
        elif args.command == "range":
            try:
                start = _parse_day(args.start)
                end = _parse_day(args.end, end_of_day=True)
            except ValueError as e:
                logger.error(f"Invalid date format. Use YYYY-MM-DD (e.g., 2026-02-04). Error: {e}")
                return 1
            _print_events(asyncio.run(engine.by_date_range(start, end)))
        elif args.command == "search":
            _print_events(asyncio.run(engine.search(args.query, args.limit)))
        elif args.command == "show":
            event = asyncio.run(engine.get_event(args.event_id))
            if event is None:
                logger.error(f"Event not found or invalid: {args.event_id}")
                return 1
            _print_events([event])
        return 0

    except NostrCalendarError as e:
        logger.error(f"Nostr calendar error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
