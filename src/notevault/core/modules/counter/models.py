"""Auto-incrementing counters for stable integer ids."""

from enum import StrEnum


class CounterType(StrEnum):
    """Entities that receive sequential integer ids.

    Each counter is one document in the ``counters`` collection, indexed on counter_type - unique.
    """

    USER = "user"
    NOTE = "note"
    SHARE = "share"
