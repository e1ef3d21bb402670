"""Calendar event RSVP (kind 31925) model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from .fields import blank_to_none


class RSVPStatus(str, Enum):
    """Attendance status."""

    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"


class FreeBusy(str, Enum):
    """Whether the responder is free or busy during the event."""

    FREE = "free"
    BUSY = "busy"


class CalendarEventRSVP(BaseModel):
    """Response to a calendar event."""

    id: str = ""
    pubkey: str = ""  # responder
    created_at: int = 0
    kind: int = 31925

    d: str
    event_coordinates: str
    status: RSVPStatus
    event_id: Optional[str] = None
    freebusy: Optional[FreeBusy] = None
    author_pubkey: Optional[str] = None  # author of the calendar event
    content: str = ""

    model_config = {"frozen": True}

    @field_validator("event_id", "author_pubkey", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)
