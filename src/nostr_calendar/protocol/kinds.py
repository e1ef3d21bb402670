"""NIP-52 event kinds and tag values."""

DATE_BASED_KIND = 31922
TIME_BASED_KIND = 31923
CALENDAR_KIND = 31924
RSVP_KIND = 31925

CALENDAR_EVENT_KINDS = (DATE_BASED_KIND, TIME_BASED_KIND)

RSVP_STATUSES = ("accepted", "declined", "tentative")
FREEBUSY_VALUES = ("free", "busy")

DATE_PATTERN = r"[0-9]{4}-[0-9]{2}-[0-9]{2}"
