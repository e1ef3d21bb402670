"""Random identifiers for newly authored replaceable events."""

import secrets
import string

ALPHABET = string.ascii_lowercase + string.digits
IDENTIFIER_LENGTH = 16


def generate_identifier(length: int = IDENTIFIER_LENGTH) -> str:
    """
    Generate a random "d" identifier.

    The identifier is public, so it only needs to be unpredictable enough to
    avoid collisions between one author's events.

    Args:
        length: Number of characters

    Returns:
        Random lowercase alphanumeric string
    """
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
