"""Tests for parsing and serializing NIP-52 events."""

import pytest

from nostr_calendar.models.calendar import Calendar, CalendarEventRef, EventCoordinate
from nostr_calendar.models.event import DateBasedCalendarEvent, Participant, TimeBasedCalendarEvent
from nostr_calendar.models.rsvp import CalendarEventRSVP, FreeBusy, RSVPStatus
from nostr_calendar.protocol.codec import (
    parse_calendar,
    parse_calendar_event,
    parse_calendar_rsvp,
    serialize_calendar,
    serialize_calendar_event,
    serialize_calendar_rsvp,
)
from nostr_calendar.protocol.validation import (
    is_valid_calendar,
    is_valid_calendar_event,
    is_valid_calendar_event_rsvp,
)


def publish(unsigned, id="ev1", pubkey="pub1", created_at=1_700_000_000):
    return unsigned.to_raw(id=id, pubkey=pubkey, created_at=created_at)


class TestParseCalendarEvent:
    def test_date_based_event(self, make_event):
        raw = make_event(
            kind=31922,
            tags=[["d", "abc"], ["title", "Meetup"], ["start", "2025-06-01"], ["end", "2025-06-03"]],
        )
        event = parse_calendar_event(raw)

        assert isinstance(event, DateBasedCalendarEvent)
        assert event.kind == 31922
        assert event.start == "2025-06-01"
        assert event.end == "2025-06-03"
        assert event.d == "abc"
        assert event.title == "Meetup"
        assert event.id == raw.id
        assert event.created_at == raw.created_at

    def test_optional_and_list_fields(self, make_event):
        raw = make_event(
            kind=31923,
            content="Bring snacks",
            tags=[
                ["d", "abc"],
                ["title", "Meetup"],
                ["summary", "Monthly meetup"],
                ["image", "https://img.example/a.png"],
                ["location", "Room 1"],
                ["location", "https://meet.example/x"],
                ["g", "u0m"],
                ["p", "pk1", "wss://relay.example", "host"],
                ["p", "pk2"],
                ["t", "python"],
                ["r", "https://example.com"],
                ["a", "31924:pub1:cal"],
                ["start", "1717200000"],
                ["start_tzid", "Europe/Zurich"],
            ],
        )
        event = parse_calendar_event(raw)

        assert isinstance(event, TimeBasedCalendarEvent)
        assert event.content == "Bring snacks"
        assert event.summary == "Monthly meetup"
        assert event.image == "https://img.example/a.png"
        assert event.locations == ("Room 1", "https://meet.example/x")
        assert event.geohash == "u0m"
        assert event.participants == (
            Participant(pubkey="pk1", relay_url="wss://relay.example", role="host"),
            Participant(pubkey="pk2"),
        )
        assert event.hashtags == ("python",)
        assert event.references == ("https://example.com",)
        assert event.calendar_refs == ("31924:pub1:cal",)
        assert event.start == 1717200000
        assert event.end is None
        assert event.start_tzid == "Europe/Zurich"
        assert event.end_tzid is None

    def test_unparsable_start_drops_event(self, make_calendar_event):
        assert parse_calendar_event(make_calendar_event(start="tomorrow", kind=31923)) is None

    def test_unparsable_end_drops_only_end(self, make_calendar_event):
        event = parse_calendar_event(make_calendar_event(start="1717200000", end="later"))
        assert event is not None
        assert event.start == 1717200000
        assert event.end is None

    @pytest.mark.parametrize("missing", ["d", "title", "start"])
    def test_missing_required_field(self, make_event, missing):
        tags = [t for t in [["d", "abc"], ["title", "T"], ["start", "1717200000"]] if t[0] != missing]
        assert parse_calendar_event(make_event(kind=31923, tags=tags)) is None

    def test_other_kinds(self, make_event):
        assert parse_calendar_event(make_event(kind=1, tags=[["d", "a"], ["title", "T"], ["start", "1"]])) is None

    def test_coordinate(self, make_calendar_event):
        event = parse_calendar_event(make_calendar_event(title="Talk", pubkey="alice"))
        assert str(event.coordinate) == "31923:alice:talk"


class TestSerializeCalendarEvent:
    def test_tag_order_time_based(self):
        event = TimeBasedCalendarEvent(
            d="abc",
            title="Meetup",
            summary="Sum",
            image="https://img",
            locations=("Room 1",),
            geohash="u0m",
            participants=(Participant(pubkey="pk1", relay_url="wss://r", role="host"),),
            hashtags=("python",),
            references=("https://example.com",),
            calendar_refs=("31924:pub1:cal",),
            start=1717200000,
            end=1717203600,
            start_tzid="Europe/Zurich",
            end_tzid="Europe/Zurich",
            content="Details",
        )
        unsigned = serialize_calendar_event(event)

        assert unsigned.kind == 31923
        assert unsigned.content == "Details"
        assert [list(t) for t in unsigned.tags] == [
            ["d", "abc"],
            ["title", "Meetup"],
            ["summary", "Sum"],
            ["image", "https://img"],
            ["location", "Room 1"],
            ["g", "u0m"],
            ["p", "pk1", "wss://r", "host"],
            ["t", "python"],
            ["r", "https://example.com"],
            ["a", "31924:pub1:cal"],
            ["start", "1717200000"],
            ["end", "1717203600"],
            ["start_tzid", "Europe/Zurich"],
            ["end_tzid", "Europe/Zurich"],
        ]

    def test_tag_order_date_based(self):
        event = DateBasedCalendarEvent(d="abc", title="Fair", start="2025-06-01", end="2025-06-03")
        unsigned = serialize_calendar_event(event)

        assert unsigned.kind == 31922
        assert [list(t) for t in unsigned.tags] == [
            ["d", "abc"],
            ["title", "Fair"],
            ["start", "2025-06-01"],
            ["end", "2025-06-03"],
        ]

    def test_role_without_relay_keeps_position(self):
        event = DateBasedCalendarEvent(
            d="abc",
            title="Fair",
            start="2025-06-01",
            participants=(Participant(pubkey="pk1", role="speaker"),),
        )
        assert ("p", "pk1", "", "speaker") in serialize_calendar_event(event).tags


class TestRoundTrip:
    @pytest.mark.parametrize(
        "event",
        [
            DateBasedCalendarEvent(
                id="ev1",
                pubkey="pub1",
                created_at=1_700_000_000,
                d="fair",
                title="Book fair",
                content="All weekend",
                start="2025-06-01",
                end="2025-06-03",
                locations=("Town hall",),
                hashtags=("books", "fair"),
                participants=(Participant(pubkey="pk1", role="speaker"),),
            ),
            TimeBasedCalendarEvent(
                id="ev1",
                pubkey="pub1",
                created_at=1_700_000_000,
                d="call",
                title="Standup",
                summary="Daily",
                image="https://img",
                geohash="u0m",
                start=1717200000,
                end=1717201800,
                start_tzid="Europe/Zurich",
                end_tzid="America/New_York",
                participants=(Participant(pubkey="pk1", relay_url="wss://r"),),
                references=("https://example.com",),
                calendar_refs=("31924:pub1:work",),
            ),
            TimeBasedCalendarEvent(
                id="ev1", pubkey="pub1", created_at=1_700_000_000, d="x", title="Point", start=5
            ),
        ],
    )
    def test_parse_inverts_serialize(self, event):
        raw = publish(serialize_calendar_event(event))

        assert is_valid_calendar_event(raw)
        assert parse_calendar_event(raw) == event


    def test_blank_optional_fields_round_trip_as_absent(self):
        event = TimeBasedCalendarEvent(
            id="ev1",
            pubkey="pub1",
            created_at=1_700_000_000,
            d="call",
            title="Standup",
            summary="",
            image="",
            start=1717200000,
            start_tzid="",
            participants=(Participant(pubkey="pk1", relay_url="", role=""),),
        )

        assert event.summary is None and event.image is None and event.start_tzid is None
        assert event.participants[0] == Participant(pubkey="pk1")
        assert parse_calendar_event(publish(serialize_calendar_event(event))) == event

    def test_blank_date_end_is_left_out(self):
        event = DateBasedCalendarEvent(d="fair", title="Fair", start="2025-06-01", end="")

        assert event.end is None
        assert serialize_calendar_event(event).tags[-1] == ("start", "2025-06-01")


class TestCalendar:
    def test_round_trip(self):
        calendar = Calendar(
            id="ev1",
            pubkey="pub1",
            created_at=1_700_000_000,
            d="work",
            title="Work",
            content="Work events",
            event_refs=(
                CalendarEventRef(kind=31923, pubkey="pub2", identifier="standup", relay_url="wss://r"),
                CalendarEventRef(kind=31922, pubkey="pub3", identifier="offsite"),
            ),
        )
        raw = publish(serialize_calendar(calendar))

        assert is_valid_calendar(raw)
        assert raw.tags[2] == ("a", "31923:pub2:standup", "wss://r")
        assert parse_calendar(raw) == calendar

    def test_malformed_references_are_skipped(self, make_event):
        raw = make_event(
            kind=31924,
            tags=[["d", "work"], ["title", "Work"], ["a", "nonsense"], ["a", "31923:pk:id:with:colons"]],
        )
        calendar = parse_calendar(raw)

        assert len(calendar.event_refs) == 1
        assert calendar.event_refs[0].identifier == "id:with:colons"
        assert calendar.event_refs[0].coordinate == EventCoordinate.parse("31923:pk:id:with:colons")

    @pytest.mark.parametrize("value", ["\u0663\u0661\u0669\u0662\u0663:pk:id", "-31923:pk:id", "31923:pk"])
    def test_malformed_coordinates(self, value):
        assert EventCoordinate.parse(value) is None


class TestRSVP:
    def test_tag_order(self):
        rsvp = CalendarEventRSVP(
            d="r1",
            event_coordinates="31923:pub1:ev1",
            status=RSVPStatus.ACCEPTED,
            event_id="abc123",
            freebusy=FreeBusy.BUSY,
            author_pubkey="pub1",
            content="See you there",
        )
        unsigned = serialize_calendar_rsvp(rsvp)

        assert unsigned.kind == 31925
        assert unsigned.content == "See you there"
        assert [list(t) for t in unsigned.tags] == [
            ["a", "31923:pub1:ev1"],
            ["d", "r1"],
            ["status", "accepted"],
            ["e", "abc123"],
            ["fb", "busy"],
            ["p", "pub1"],
        ]

    def test_declined_drops_freebusy(self):
        rsvp = CalendarEventRSVP(
            d="r1",
            event_coordinates="31923:pub1:ev1",
            status=RSVPStatus.DECLINED,
            freebusy=FreeBusy.FREE,
        )
        unsigned = serialize_calendar_rsvp(rsvp)

        assert all(tag[0] != "fb" for tag in unsigned.tags)
        assert is_valid_calendar_event_rsvp(publish(unsigned))

    def test_round_trip(self):
        rsvp = CalendarEventRSVP(
            id="ev1",
            pubkey="pub1",
            created_at=1_700_000_000,
            d="r1",
            event_coordinates="31922:pub2:fair",
            status=RSVPStatus.TENTATIVE,
            freebusy=FreeBusy.FREE,
            author_pubkey="pub2",
        )
        raw = publish(serialize_calendar_rsvp(rsvp))

        assert parse_calendar_rsvp(raw) == rsvp

    def test_parse_rejects_unknown_status(self, make_event):
        raw = make_event(kind=31925, tags=[["a", "31923:p:e"], ["d", "r1"], ["status", "maybe"]])
        assert parse_calendar_rsvp(raw) is None
