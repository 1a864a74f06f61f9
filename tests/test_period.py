import time

import pytest

from grid3_uptime.period import (
    FIRST_PERIOD_START_TIMESTAMP,
    POST_PERIOD_UPTIME_FETCH,
    STANDARD_PERIOD_DURATION,
    Period,
)


def test_first_period():
    period = Period(offset=0)
    assert period.start == FIRST_PERIOD_START_TIMESTAMP
    assert period.end == FIRST_PERIOD_START_TIMESTAMP + STANDARD_PERIOD_DURATION
    assert period.duration() == STANDARD_PERIOD_DURATION
    assert (period.month, period.month_name, period.year) == (4, "April", 2018)


def test_period_from_timestamp():
    assert Period(timestamp=FIRST_PERIOD_START_TIMESTAMP).offset == 0
    assert Period(timestamp=FIRST_PERIOD_START_TIMESTAMP - 1).offset == -1
    ts = FIRST_PERIOD_START_TIMESTAMP + 5 * STANDARD_PERIOD_DURATION + 100
    period = Period(timestamp=ts)
    assert period.offset == 5
    assert period.timestamp_in_period(ts)


def test_consecutive_periods_touch():
    assert Period(offset=10).end == Period(offset=11).start


def test_current_period_contains_now():
    before = time.time()
    period = Period()
    assert period.start <= before <= period.end


def test_timestamp_in_period_is_inclusive():
    period = Period(offset=3)
    assert period.timestamp_in_period(period.start)
    assert period.timestamp_in_period(period.end)
    assert not period.timestamp_in_period(period.start - 1)
    assert not period.timestamp_in_period(period.end + 1)


def test_scale_start():
    period = Period(offset=3)
    period.scale_start(period.start + 1000)
    assert period.duration() == STANDARD_PERIOD_DURATION - 1000


def test_scale_start_past_end():
    period = Period(offset=3)
    with pytest.raises(ValueError):
        period.scale_start(period.end)


def test_fetch_range_reaches_past_end():
    period = Period(offset=3)
    assert period.fetch_range() == (period.start, period.end + POST_PERIOD_UPTIME_FETCH)
    assert period.fetch_range(post_period=0) == (period.start, period.end)
