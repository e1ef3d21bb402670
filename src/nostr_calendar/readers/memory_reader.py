"""In-memory event source, optionally loaded from a JSON file."""

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..models.raw import Filter, RawEvent
from ..utils.exceptions import EventQueryError
from .base import EventSource

logger = logging.getLogger(__name__)


class InMemoryEventSource(EventSource):
    """Answer queries from a fixed set of events, the way a relay would."""

    def __init__(self, events: Iterable[RawEvent] = ()):
        """
        Initialize the source.

        Args:
            events: Events to serve
        """
        self._events: dict[str, RawEvent] = {}
        for event in events:
            self.add(event)

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryEventSource":
        """
        Load events from a JSON array or a JSON-lines file.

        Entries that are not well-formed events are skipped with a warning.

        Args:
            path: File to read

        Returns:
            Source serving the loaded events

        Raises:
            EventQueryError: If the file cannot be read or decoded
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise EventQueryError(f"Failed to read events from {path}: {e}") from e

        try:
            stripped = text.lstrip()
            if stripped.startswith("["):
                records: list[Any] = json.loads(stripped)
            else:
                records = [json.loads(line) for line in text.splitlines() if line.strip()]
        except json.JSONDecodeError as e:
            raise EventQueryError(f"Invalid JSON in {path}: {e}") from e

        source = cls()
        for record in records:
            try:
                source.add(RawEvent.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping malformed event in {path}: {e.error_count()} error(s)")
        logger.info(f"Loaded {len(source)} events from {path}")
        return source

    def add(self, event: RawEvent) -> None:
        """Store an event; an event with the same id replaces the old copy."""
        self._events[event.id] = event

    def all_events(self) -> list[RawEvent]:
        """Every stored event, newest first."""
        return sorted(self._events.values(), key=lambda e: e.created_at, reverse=True)

    def __len__(self) -> int:
        return len(self._events)

    async def query(self, filters: Sequence[Filter]) -> list[RawEvent]:
        """Return events matching any filter, newest first per filter and capped at its limit."""
        found: dict[str, RawEvent] = {}
        newest_first = self.all_events()
        for query_filter in filters:
            matches = [e for e in newest_first if query_filter.matches(e)]
            if query_filter.limit is not None:
                matches = matches[: query_filter.limit]
            for event in matches:
                found.setdefault(event.id, event)
        return list(found.values())
