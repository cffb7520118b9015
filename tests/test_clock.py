"""
Tests for id generation and calendar-day helpers.
"""
from datetime import UTC, date, datetime, timezone, timedelta

from odora.clock import TimestampIdFactory, calendar_date, epoch_millis


def test_ids_are_epoch_millis():
    moment = datetime(2025, 3, 1, tzinfo=UTC)
    factory = TimestampIdFactory(lambda: moment)
    assert factory() == str(epoch_millis(moment))


def test_ids_bump_on_collision_and_clock_skew():
    moments = iter(
        [
            datetime(2025, 3, 1, 0, 0, 1, tzinfo=UTC),
            datetime(2025, 3, 1, 0, 0, 1, tzinfo=UTC),
            datetime(2025, 3, 1, 0, 0, 0, tzinfo=UTC),
        ]
    )
    factory = TimestampIdFactory(lambda: next(moments))
    first, second, third = factory(), factory(), factory()
    assert int(second) == int(first) + 1
    assert int(third) == int(second) + 1


def test_calendar_date_converts_aware_times():
    tokyo = timezone(timedelta(hours=9))
    moment = datetime(2025, 3, 1, 20, 0, tzinfo=UTC)
    assert calendar_date(moment) == date(2025, 3, 1)
    assert calendar_date(moment, tokyo) == date(2025, 3, 2)


def test_calendar_date_naive_is_wall_clock():
    assert calendar_date(datetime(2025, 3, 1, 23, 59), UTC) == date(2025, 3, 1)
