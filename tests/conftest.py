"""Shared fixtures for calendar tests."""

import itertools
from typing import Optional

import pytest

from nostr_calendar.config import QueryConfig
from nostr_calendar.models.raw import RawEvent, UnsignedEvent
from nostr_calendar.queries.engine import CalendarQueryEngine
from nostr_calendar.readers.memory_reader import InMemoryEventSource
from nostr_calendar.writers.base import EventPublisher

# 2025-06-01 12:00:00 UTC
NOW = 1748779200


class RecordingPublisher(EventPublisher):
    """Publisher that "signs" events with counters and remembers them."""

    def __init__(self, pubkey: str = "me", error: Optional[Exception] = None):
        self.pubkey = pubkey
        self.error = error
        self.published: list[UnsignedEvent] = []
        self._ids = itertools.count(1)

    async def publish(self, event: UnsignedEvent) -> RawEvent:
        if self.error is not None:
            raise self.error
        self.published.append(event)
        return event.to_raw(id=f"published-{next(self._ids)}", pubkey=self.pubkey, created_at=NOW)


@pytest.fixture
def make_event():
    """Factory for raw events with sensible defaults."""
    counter = itertools.count(1)

    def _make(kind=31923, tags=(), id=None, pubkey="pub1", created_at=None, content=""):
        n = next(counter)
        return RawEvent(
            id=id or f"ev{n}",
            pubkey=pubkey,
            kind=kind,
            created_at=created_at if created_at is not None else 1_700_000_000 + n,
            content=content,
            tags=[list(tag) for tag in tags],
        )

    return _make


@pytest.fixture
def make_calendar_event(make_event):
    """Factory for valid calendar events with a title and start."""

    def _make(title="Event", start="1750000000", end=None, kind=None, extra=(), **kwargs):
        if kind is None:
            kind = 31922 if "-" in str(start) else 31923
        tags = [["d", kwargs.pop("d", title.lower().replace(" ", "-"))], ["title", title], ["start", str(start)]]
        if end is not None:
            tags.append(["end", str(end)])
        tags.extend(extra)
        return make_event(kind=kind, tags=tags, **kwargs)

    return _make


@pytest.fixture
def limits(tmp_path):
    return QueryConfig(config_path=tmp_path / "missing.yaml")


@pytest.fixture
def engine_for(limits):
    """Build a query engine over the given events with a fixed clock."""

    def _build(events, now=NOW, timeout=5.0, timezone="UTC", source=None):
        return CalendarQueryEngine(
            source or InMemoryEventSource(events),
            timeout=timeout,
            timezone=timezone,
            limits=limits,
            clock=lambda: now,
        )

    return _build


@pytest.fixture
def publisher():
    return RecordingPublisher()
