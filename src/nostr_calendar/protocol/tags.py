"""Lookups over Nostr tag arrays."""

from collections.abc import Sequence
from typing import Optional

Tags = Sequence[Sequence[str]]


def find_tag(tags: Tags, key: str) -> Optional[Sequence[str]]:
    """Return the first tag whose name is ``key``, or None."""
    for tag in tags:
        if tag and tag[0] == key:
            return tag
    return None


def find_tags(tags: Tags, key: str) -> list[Sequence[str]]:
    """Return every tag whose name is ``key``, in order."""
    return [tag for tag in tags if tag and tag[0] == key]


def has_tag(tags: Tags, key: str) -> bool:
    return find_tag(tags, key) is not None


def first_value(tags: Tags, key: str) -> Optional[str]:
    """
    Value of the first tag named ``key``.

    Args:
        tags: Event tags
        key: Tag name

    Returns:
        Second element of the first matching tag, or None if no tag matches
        or the matching tag has no value
    """
    tag = find_tag(tags, key)
    if tag is None or len(tag) < 2:
        return None
    return tag[1]


def all_values(tags: Tags, key: str) -> list[str]:
    """
    Values of every tag named ``key``.

    Args:
        tags: Event tags
        key: Tag name

    Returns:
        Second elements of matching tags in original order (valueless tags skipped)
    """
    return [tag[1] for tag in find_tags(tags, key) if len(tag) > 1]


def tag_extra(tag: Sequence[str], position: int) -> Optional[str]:
    """Positional element of a tag, with empty strings treated as absent."""
    if len(tag) > position and tag[position]:
        return tag[position]
    return None
