from __future__ import annotations

from datetime import date, datetime

import pytest

from workorder_timeline import intervals
from workorder_timeline.models import TimeScale


@pytest.mark.parametrize(
    "value, scale, expected",
    [
        (datetime(2024, 3, 5, 14, 30), TimeScale.DAY, datetime(2024, 3, 5)),
        (datetime(2024, 3, 5, 14, 30), TimeScale.WEEK, datetime(2024, 3, 3)),
        (datetime(2024, 3, 3, 0, 0), TimeScale.WEEK, datetime(2024, 3, 3)),
        (datetime(2024, 3, 9, 23, 59), TimeScale.WEEK, datetime(2024, 3, 3)),
        (datetime(2024, 3, 5, 14, 30), TimeScale.MONTH, datetime(2024, 3, 1)),
        (date(2024, 3, 5), TimeScale.DAY, datetime(2024, 3, 5)),
    ],
)
def test_floor(value, scale, expected) -> None:
    assert intervals.floor(value, scale) == expected


def test_floor_is_idempotent_and_not_after_input() -> None:
    moment = datetime(2024, 7, 17, 9, 15)
    for scale in TimeScale:
        floored = intervals.floor(moment, scale)
        assert floored <= moment
        assert intervals.floor(floored, scale) == floored


@pytest.mark.parametrize(
    "value, count, scale, expected",
    [
        (datetime(2024, 3, 5), 3, TimeScale.DAY, datetime(2024, 3, 8)),
        (datetime(2024, 3, 5), -5, TimeScale.DAY, datetime(2024, 2, 29)),
        (datetime(2024, 3, 5), 2, TimeScale.WEEK, datetime(2024, 3, 19)),
        (datetime(2024, 3, 5), -1, TimeScale.MONTH, datetime(2024, 2, 5)),
        (datetime(2024, 11, 15), 3, TimeScale.MONTH, datetime(2025, 2, 15)),
        (datetime(2024, 1, 31), 1, TimeScale.MONTH, datetime(2024, 2, 29)),
        (datetime(2023, 1, 31), 1, TimeScale.MONTH, datetime(2023, 2, 28)),
        (datetime(2024, 3, 5, 8, 45), 0, TimeScale.MONTH, datetime(2024, 3, 5, 8, 45)),
    ],
)
def test_offset(value, count, scale, expected) -> None:
    assert intervals.offset(value, count, scale) == expected


def test_offset_keeps_time_of_day() -> None:
    assert intervals.offset(datetime(2024, 3, 5, 6, 30), 1, TimeScale.WEEK) == datetime(2024, 3, 12, 6, 30)


def test_ceil_and_round() -> None:
    assert intervals.ceil(datetime(2024, 3, 5, 0, 1), TimeScale.DAY) == datetime(2024, 3, 6)
    assert intervals.ceil(datetime(2024, 3, 5), TimeScale.DAY) == datetime(2024, 3, 5)
    assert intervals.ceil(datetime(2024, 3, 5), TimeScale.MONTH) == datetime(2024, 4, 1)

    assert intervals.round_(datetime(2024, 3, 5, 11, 59), TimeScale.DAY) == datetime(2024, 3, 5)
    assert intervals.round_(datetime(2024, 3, 5, 12, 0), TimeScale.DAY) == datetime(2024, 3, 6)


def test_range_covers_floor_of_start_until_end() -> None:
    boundaries = intervals.range_(datetime(2024, 3, 5, 12), datetime(2024, 3, 8), TimeScale.DAY)

    assert boundaries == [datetime(2024, 3, 5), datetime(2024, 3, 6), datetime(2024, 3, 7)]


def test_range_months_are_ascending_and_aligned() -> None:
    boundaries = intervals.range_(datetime(2024, 11, 20), datetime(2025, 2, 2), TimeScale.MONTH)

    assert boundaries == [
        datetime(2024, 11, 1),
        datetime(2024, 12, 1),
        datetime(2025, 1, 1),
        datetime(2025, 2, 1),
    ]
    assert all(intervals.floor(value, TimeScale.MONTH) == value for value in boundaries)


def test_range_is_empty_when_end_not_after_start() -> None:
    assert intervals.range_(datetime(2024, 3, 5), datetime(2024, 3, 5), TimeScale.DAY) == []
    assert intervals.range_(datetime(2024, 3, 5), datetime(2024, 3, 1), TimeScale.WEEK) == []


def test_interval_for_binds_scale() -> None:
    weeks = intervals.interval_for("week")

    assert weeks.scale is TimeScale.WEEK
    assert weeks.floor(date(2024, 3, 5)) == datetime(2024, 3, 3)
    assert weeks.offset(datetime(2024, 3, 3), 1) == datetime(2024, 3, 10)
    assert weeks.range(datetime(2024, 3, 3), datetime(2024, 3, 17)) == [
        datetime(2024, 3, 3),
        datetime(2024, 3, 10),
    ]
    assert intervals.interval_for(TimeScale.WEEK) is weeks


@pytest.mark.parametrize("scale", list(TimeScale))
@pytest.mark.parametrize(
    "moment",
    [
        datetime(2024, 2, 29, 23, 59, 59),
        datetime(2024, 3, 3),
        datetime(2024, 12, 31, 12),
        datetime(2025, 1, 1),
    ],
)
def test_grid_properties(moment: datetime, scale: TimeScale) -> None:
    floored = intervals.floor(moment, scale)

    assert intervals.range_(floored, floored, scale) == []
    assert intervals.offset(floored, 1, scale) > moment


@pytest.mark.parametrize(
    "value, count, scale, expected",
    [
        (datetime(9999, 12, 31), 1, TimeScale.DAY, datetime.max),
        (datetime(9999, 12, 26), 1, TimeScale.WEEK, datetime.max),
        (datetime(9999, 12, 1), 1, TimeScale.MONTH, datetime.max),
        (datetime(1, 1, 1), -1, TimeScale.DAY, datetime.min),
        (datetime(1, 1, 1), -1, TimeScale.MONTH, datetime.min),
        (datetime(2024, 1, 1), 10**10, TimeScale.DAY, datetime.max),
    ],
)
def test_offset_clamps_to_representable_range(value, count, scale, expected) -> None:
    assert intervals.offset(value, count, scale) == expected


def test_functions_are_total_near_datetime_bounds() -> None:
    assert intervals.floor(datetime(1, 1, 1, 8), TimeScale.WEEK) == datetime.min
    assert intervals.ceil(datetime(9999, 12, 31, 12), TimeScale.DAY) == datetime.max
    assert intervals.round_(datetime(9999, 12, 31, 6), TimeScale.DAY) == datetime(9999, 12, 31)
    assert intervals.range_(date(9999, 12, 31), datetime.max, TimeScale.DAY) == [datetime(9999, 12, 31)]
    assert intervals.range_(date(9999, 12, 1), datetime.max, TimeScale.MONTH) == [datetime(9999, 12, 1)]
