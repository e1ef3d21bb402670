"""IANA timezone lookups backed by the pytz database."""

import pytz


def is_valid_timezone(name: str) -> bool:
    """
    Check whether a string is a timezone identifier known to the tz database.

    Args:
        name: Candidate IANA identifier, e.g. "Europe/Zurich"

    Returns:
        True if pytz can build a timezone for it, False otherwise
    """
    if not isinstance(name, str) or not name:
        return False
    try:
        pytz.timezone(name)
    except (pytz.UnknownTimeZoneError, ValueError):
        return False
    return True
