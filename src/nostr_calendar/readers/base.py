"""Abstract base class for event sources."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models.raw import Filter, RawEvent


class EventSource(ABC):
    """Query side of a Nostr client (relay pool, cache, fixture file...)."""

    @abstractmethod
    async def query(self, filters: Sequence[Filter]) -> list[RawEvent]:
        """
        Fetch events matching any of the filters.

        Args:
            filters: Filters, logically OR'd

        Returns:
            Matching raw events, in no guaranteed order

        Raises:
            EventQueryError: If the query fails
        """
