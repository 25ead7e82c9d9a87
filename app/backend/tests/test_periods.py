from __future__ import annotations

from datetime import date, timedelta

import pytest

from gia.models.entities import PeriodGranularity, TimelineEntry
from gia.services.periods import InvalidGranularityError, bucket_entries, resolve_period

ANCHORS = [
    date(2026, 1, 1),
    date(2026, 1, 15),
    date(2026, 2, 28),
    date(2024, 2, 29),
    date(2026, 3, 31),
    date(2026, 12, 31),
    date(2027, 6, 6),
]


def test_quarter_rollover_to_previous_year() -> None:
    period = resolve_period(date(2026, 1, 15), PeriodGranularity.QUARTER, -1)

    assert (period.start, period.end) == (date(2025, 10, 1), date(2025, 12, 31))


def test_month_rollover_to_previous_year() -> None:
    period = resolve_period(date(2026, 1, 15), PeriodGranularity.MONTH, -1)

    assert (period.start, period.end) == (date(2025, 12, 1), date(2025, 12, 31))


def test_month_length_in_non_leap_and_leap_year() -> None:
    february = resolve_period(date(2026, 2, 10), PeriodGranularity.MONTH, 0)
    leap_february = resolve_period(date(2024, 2, 10), PeriodGranularity.MONTH, 0)

    assert (february.start, february.end) == (date(2026, 2, 1), date(2026, 2, 28))
    assert leap_february.end == date(2024, 2, 29)


def test_month_offset_crosses_several_years() -> None:
    assert resolve_period(date(2026, 11, 30), PeriodGranularity.MONTH, 14).start == date(2028, 1, 1)
    assert resolve_period(date(2026, 3, 31), PeriodGranularity.MONTH, -27).start == date(2023, 12, 1)


def test_quarter_offsets_forward_and_backward() -> None:
    assert resolve_period(date(2026, 11, 2), PeriodGranularity.QUARTER, 1).start == date(2027, 1, 1)
    assert resolve_period(date(2026, 5, 20), PeriodGranularity.QUARTER, -6).start == date(2024, 10, 1)
    assert resolve_period(date(2026, 5, 20), PeriodGranularity.QUARTER, 0).end == date(2026, 6, 30)


def test_week_starts_on_monday_and_spans_seven_days() -> None:
    # 2026-02-26 is a Thursday
    period = resolve_period(date(2026, 2, 26), PeriodGranularity.WEEK, 0)

    assert period.start == date(2026, 2, 23)
    assert period.end == date(2026, 3, 1)

    sunday = resolve_period(date(2026, 3, 1), PeriodGranularity.WEEK, 0)
    assert sunday.start == date(2026, 2, 23)


def test_week_start_is_configurable() -> None:
    period = resolve_period(date(2026, 2, 26), PeriodGranularity.WEEK, 0, week_start=6)

    assert period.start == date(2026, 2, 22)
    assert period.end == date(2026, 2, 28)


def test_day_and_year_ranges() -> None:
    day = resolve_period(date(2026, 12, 31), PeriodGranularity.DAY, 1)
    year = resolve_period(date(2026, 7, 4), PeriodGranularity.YEAR, -1)

    assert (day.start, day.end) == (date(2027, 1, 1), date(2027, 1, 1))
    assert (year.start, year.end) == (date(2025, 1, 1), date(2025, 12, 31))


@pytest.mark.parametrize("granularity", list(PeriodGranularity))
@pytest.mark.parametrize("anchor", ANCHORS)
def test_consecutive_periods_are_contiguous(anchor: date, granularity: PeriodGranularity) -> None:
    for offset in range(-5, 6):
        period = resolve_period(anchor, granularity, offset)
        following = resolve_period(anchor, granularity, offset + 1)

        assert period.start <= period.end
        assert period.end + timedelta(days=1) == following.start
        if granularity is PeriodGranularity.WEEK:
            assert (period.end - period.start).days == 6


@pytest.mark.parametrize("granularity", list(PeriodGranularity))
@pytest.mark.parametrize("anchor", ANCHORS)
def test_offset_zero_contains_anchor(anchor: date, granularity: PeriodGranularity) -> None:
    assert resolve_period(anchor, granularity, 0).contains(anchor)


def test_string_granularity_is_accepted() -> None:
    assert resolve_period(date(2026, 5, 1), "Quarter").start == date(2026, 4, 1)


def test_unknown_granularity_fails_loudly() -> None:
    with pytest.raises(InvalidGranularityError, match="fortnight"):
        resolve_period(date(2026, 5, 1), "fortnight")


def test_bucket_entries_splits_current_and_next_and_drops_others() -> None:
    entries = [
        TimelineEntry(id="before", start_time=date(2026, 1, 31), status="", description=""),
        TimelineEntry(id="cur-1", start_time=date(2026, 2, 1), status="", description=""),
        TimelineEntry(id="next-1", start_time=date(2026, 3, 31), status="", description=""),
        TimelineEntry(id="cur-2", start_time=date(2026, 2, 28), status="", description=""),
        TimelineEntry(id="after", start_time=date(2026, 4, 1), status="", description=""),
    ]

    buckets = bucket_entries(entries, date(2026, 2, 26), PeriodGranularity.MONTH)

    assert [entry.id for entry in buckets.current] == ["cur-1", "cur-2"]
    assert [entry.id for entry in buckets.next] == ["next-1"]


@pytest.mark.parametrize("granularity", list(PeriodGranularity))
def test_bucket_entries_never_overlap(granularity: PeriodGranularity) -> None:
    start = date(2025, 12, 1)
    entries = [
        TimelineEntry(id=str(day), start_time=start + timedelta(days=day), status="", description="")
        for day in range(0, 500, 3)
    ]

    buckets = bucket_entries(entries, date(2026, 2, 26), granularity)

    current_ids = {entry.id for entry in buckets.current}
    next_ids = {entry.id for entry in buckets.next}
    assert current_ids.isdisjoint(next_ids)
