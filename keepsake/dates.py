"""Days-together arithmetic against the configured reference date.

All computation happens in UTC; naive datetimes are taken to be UTC.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)

Clock = Callable[[], datetime]


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def days_since(reference: datetime, now: datetime) -> int:
    """Whole days elapsed from *reference* to *now*, floored.

    Negative when *now* precedes *reference*.
    """
    return (_aware(now) - _aware(reference)) // _ONE_DAY


def _system_clock() -> datetime:
    return datetime.now(UTC)


class DayCounter:
    """Counts days since a fixed reference instant.

    The reference is injected at startup (``settings.get_love_day()`` in
    production) and *clock* can be swapped in tests.
    """

    def __init__(self, reference: datetime, clock: Clock | None = None) -> None:
        self._reference = _aware(reference)
        self._clock = clock or _system_clock

    @property
    def reference(self) -> datetime:
        return self._reference

    def now(self) -> datetime:
        return _aware(self._clock())

    def days_together(self, now: datetime | None = None) -> int:
        """Days since the reference date, as of *now* (default: the clock)."""
        count = days_since(self._reference, now or self.now())
        logger.debug("Days together: %d", count)
        return count
