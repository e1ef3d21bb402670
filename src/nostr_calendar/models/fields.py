"""Helpers shared by the calendar models."""


def blank_to_none(value):
    """Empty optional strings mean the same as a missing tag."""
    return None if value == "" else value
