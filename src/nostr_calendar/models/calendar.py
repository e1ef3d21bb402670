"""Calendar (kind 31924) and event coordinate models."""

import re
from typing import Optional

from pydantic import BaseModel, field_validator

from .fields import blank_to_none

_KIND_RE = re.compile(r"[0-9]+")


class EventCoordinate(BaseModel):
    """Address of a replaceable event: "<kind>:<pubkey>:<identifier>"."""

    kind: int
    pubkey: str
    identifier: str

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, value: str) -> Optional["EventCoordinate"]:
        """
        Parse a coordinate string.

        The identifier may itself contain ":" and is kept whole.

        Args:
            value: Coordinate string

        Returns:
            EventCoordinate, or None if the string is malformed
        """
        if not isinstance(value, str):
            return None
        parts = value.split(":", 2)
        if len(parts) < 3 or not _KIND_RE.fullmatch(parts[0]):
            return None
        return cls(kind=int(parts[0]), pubkey=parts[1], identifier=parts[2])

    def __str__(self) -> str:
        return f"{self.kind}:{self.pubkey}:{self.identifier}"


class CalendarEventRef(BaseModel):
    """Reference from a calendar to one of its events."""

    kind: int
    pubkey: str
    identifier: str
    relay_url: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("relay_url", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)

    @property
    def coordinate(self) -> EventCoordinate:
        return EventCoordinate(kind=self.kind, pubkey=self.pubkey, identifier=self.identifier)


class Calendar(BaseModel):
    """Named collection of calendar event references."""

    id: str = ""
    pubkey: str = ""
    created_at: int = 0
    kind: int = 31924

    d: str
    title: str
    content: str = ""
    event_refs: tuple[CalendarEventRef, ...] = ()

    model_config = {"frozen": True}
