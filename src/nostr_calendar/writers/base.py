"""Abstract base class for event publishers."""

from abc import ABC, abstractmethod

from ..models.raw import RawEvent, UnsignedEvent


class EventPublisher(ABC):
    """Publish side of a Nostr client: signs and submits events to relays."""

    @abstractmethod
    async def publish(self, event: UnsignedEvent) -> RawEvent:
        """
        Sign and publish an event.

        Args:
            event: Kind, content and tags to publish

        Returns:
            The signed event as accepted by the relays

        Raises:
            EventPublishError: If signing or publishing fails
        """
