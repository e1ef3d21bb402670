"""Wire-level Nostr event and filter models."""

from typing import Any, Optional

from pydantic import BaseModel, Field

Tag = tuple[str, ...]


class RawEvent(BaseModel):
    """A signed Nostr event as returned by a relay."""

    id: str
    pubkey: str
    kind: int
    created_at: int  # Unix seconds
    content: str = ""
    tags: tuple[Tag, ...] = ()
    sig: str = ""

    model_config = {"frozen": True}


class UnsignedEvent(BaseModel):
    """Event fields built locally; id, pubkey, created_at and sig come from the signer."""

    kind: int
    content: str = ""
    tags: tuple[Tag, ...] = ()

    model_config = {"frozen": True}

    def to_raw(self, id: str, pubkey: str, created_at: int, sig: str = "") -> RawEvent:
        """
        Combine with signer-supplied fields into a full event.

        Args:
            id: Event id
            pubkey: Author public key
            created_at: Creation time in Unix seconds
            sig: Signature

        Returns:
            RawEvent carrying this event's kind, content and tags
        """
        return RawEvent(
            id=id,
            pubkey=pubkey,
            kind=self.kind,
            created_at=created_at,
            content=self.content,
            tags=self.tags,
            sig=sig,
        )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict in the NIP-01 layout."""
        return {
            "kind": self.kind,
            "content": self.content,
            "tags": [list(tag) for tag in self.tags],
        }


class Filter(BaseModel):
    """NIP-01 subscription filter. Several filters in one query are OR'd."""

    kinds: list[int] = Field(default_factory=list)
    ids: Optional[list[str]] = None
    authors: Optional[list[str]] = None
    tags: dict[str, list[str]] = Field(default_factory=dict)  # "t" -> ["music"]
    limit: Optional[int] = None
    until: Optional[int] = None

    model_config = {"frozen": True}

    def to_wire(self) -> dict[str, Any]:
        """Render with tag filters under their "#<name>" keys."""
        wire: dict[str, Any] = {"kinds": list(self.kinds)}
        if self.ids is not None:
            wire["ids"] = list(self.ids)
        if self.authors is not None:
            wire["authors"] = list(self.authors)
        for name, values in self.tags.items():
            wire[f"#{name}"] = list(values)
        if self.limit is not None:
            wire["limit"] = self.limit
        if self.until is not None:
            wire["until"] = self.until
        return wire

    def matches(self, event: RawEvent) -> bool:
        """
        Check whether an event satisfies every condition of this filter.

        Args:
            event: Event to test

        Returns:
            True if the event matches (limit is not considered)
        """
        if self.kinds and event.kind not in self.kinds:
            return False
        if self.ids is not None and event.id not in self.ids:
            return False
        if self.authors is not None and event.pubkey not in self.authors:
            return False
        if self.until is not None and event.created_at > self.until:
            return False
        for name, values in self.tags.items():
            event_values = {tag[1] for tag in event.tags if len(tag) > 1 and tag[0] == name}
            if not event_values.intersection(values):
                return False
        return True
