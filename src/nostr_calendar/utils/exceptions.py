"""Custom exceptions for the Nostr calendar client."""


class NostrCalendarError(Exception):
    """Base exception for Nostr calendar errors."""


class AuthoringError(NostrCalendarError, ValueError):
    """Raised when an event or RSVP fails an authoring precondition."""


class EventQueryError(NostrCalendarError):
    """Raised when querying the event source fails."""


class QueryTimeoutError(EventQueryError):
    """Raised when a query does not complete within the configured timeout."""


class EventPublishError(NostrCalendarError):
    """Raised when publishing an event fails."""


class ConfigurationError(NostrCalendarError):
    """Raised when configuration is invalid."""
