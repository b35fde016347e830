"""UTC clock helpers.

Cache entries are stamped with **naive** UTC datetimes so that timestamps
from ``utcnow()`` and from injected test clocks compare without tzinfo
mismatches.
"""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)
