"""NIP-52 calendar event data model."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, field_validator

from ..protocol.kinds import DATE_BASED_KIND, TIME_BASED_KIND
from .calendar import EventCoordinate
from .fields import blank_to_none


class Participant(BaseModel):
    """Participant listed in a "p" tag."""

    pubkey: str
    relay_url: Optional[str] = None
    role: Optional[str] = None  # e.g. "speaker", "host"

    model_config = {"frozen": True}

    @field_validator("relay_url", "role", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)


class BaseCalendarEvent(BaseModel):
    """Fields shared by date-based and time-based calendar events."""

    # Set by the signer; empty for events that have not been published yet
    id: str = ""
    pubkey: str = ""
    created_at: int = 0

    d: str
    title: str
    content: str = ""
    summary: Optional[str] = None
    image: Optional[str] = None
    locations: tuple[str, ...] = ()
    geohash: Optional[str] = None
    participants: tuple[Participant, ...] = ()
    hashtags: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    calendar_refs: tuple[str, ...] = ()  # "31924:<pubkey>:<d>" coordinates

    model_config = {"frozen": True}

    @field_validator("summary", "image", "geohash", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)

    @property
    def coordinate(self) -> EventCoordinate:
        """Address of this replaceable event."""
        return EventCoordinate(kind=self.kind, pubkey=self.pubkey, identifier=self.d)


class DateBasedCalendarEvent(BaseCalendarEvent):
    """All-day or multi-day event (kind 31922)."""

    kind: Literal[31922] = DATE_BASED_KIND
    start: str  # inclusive, YYYY-MM-DD
    end: Optional[str] = None  # exclusive, YYYY-MM-DD

    @field_validator("end", mode="before")
    @classmethod
    def _blank_end_is_absent(cls, value):
        return blank_to_none(value)


class TimeBasedCalendarEvent(BaseCalendarEvent):
    """Event bounded by timestamps (kind 31923)."""

    kind: Literal[31923] = TIME_BASED_KIND
    start: int  # inclusive, Unix seconds
    end: Optional[int] = None  # exclusive, Unix seconds
    start_tzid: Optional[str] = None
    end_tzid: Optional[str] = None

    @field_validator("start_tzid", "end_tzid", mode="before")
    @classmethod
    def _blank_tzid_is_absent(cls, value):
        return blank_to_none(value)


CalendarEvent = Union[DateBasedCalendarEvent, TimeBasedCalendarEvent]
