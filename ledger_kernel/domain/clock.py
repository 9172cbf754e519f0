"""
Clock -- injectable time source.

Responsibility:
    The only timestamp a report carries is ``metadata.generated_at``.  It
    comes from a ``Clock`` handed to ``ReportingService``, so assembly
    code never reads the wall clock and tests can pin the stamp.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the single place that touches
    real time.

Failure modes:
    None.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

DEFAULT_TEST_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware "now" values."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Pinned clock for tests.

    ``now()`` is stable until the clock is moved with ``advance`` or
    ``set_time``.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or DEFAULT_TEST_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)
