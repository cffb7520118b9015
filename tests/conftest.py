from datetime import UTC, datetime, timedelta

import pytest

from odora.storage import InMemoryStorage


class FakeClock:
    """Settable clock for deterministic timestamps and calendar days."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class CountingStorage(InMemoryStorage):
    """In-memory storage that records every write."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[str] = []

    async def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        await super().set(key, value)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 9, 30, tzinfo=UTC))


@pytest.fixture
def storage():
    return CountingStorage()
