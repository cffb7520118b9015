"""Injectable time sources and id generation."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TypeAlias
from datetime import UTC, date, datetime, tzinfo

__all__ = [
    "Clock",
    "system_clock",
    "epoch_millis",
    "calendar_date",
    "TimestampIdFactory",
]

Clock: TypeAlias = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(UTC)


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch; naive values are read as local time."""
    return int(moment.timestamp() * 1000)


def calendar_date(moment: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of ``moment`` as seen in ``tz``.

    Aware datetimes are converted into ``tz`` first. Naive datetimes are
    already wall-clock values and are used as they are.
    """
    if moment.tzinfo is not None and tz is not None:
        moment = moment.astimezone(tz)
    return moment.date()


class TimestampIdFactory:
    """Produce time-derived ids that never repeat within the process.

    Ids are epoch milliseconds rendered as decimal strings. When two calls
    land on the same millisecond the later one is bumped forward by one.
    """

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = epoch_millis(self._clock())
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)
