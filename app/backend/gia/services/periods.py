"""Calendar period boundaries and timeline bucketing."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from gia.models.entities import DateRange, PeriodGranularity, TimelineEntry
from gia.models.policy import MONDAY

logger = logging.getLogger("gia.periods")


class InvalidGranularityError(ValueError):
    """Raised when a caller asks for a period unit that does not exist."""


@dataclass(slots=True)
class PeriodBuckets:
    current: list[TimelineEntry]
    next: list[TimelineEntry]


def coerce_granularity(value: PeriodGranularity | str) -> PeriodGranularity:
    if isinstance(value, PeriodGranularity):
        return value
    try:
        return PeriodGranularity(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(item.value for item in PeriodGranularity)
        raise InvalidGranularityError(f"Unknown granularity {value!r}; expected one of: {allowed}.") from None


def month_start(year: int, month_index: int) -> date:
    """First day of the month ``month_index`` (0-based) months after January of ``year``.

    Negative or large indexes roll over whole years with floor division.
    """

    year_delta, month0 = divmod(month_index, 12)
    return date(year + year_delta, month0 + 1, 1)


def _month_span(year: int, month_index: int, months: int) -> DateRange:
    start = month_start(year, month_index)
    end = month_start(year, month_index + months) - timedelta(days=1)
    return DateRange(start=start, end=end)


def resolve_period(
    anchor: date,
    granularity: PeriodGranularity | str,
    offset: int = 0,
    *,
    week_start: int = MONDAY,
) -> DateRange:
    """Return the inclusive range of the period ``offset`` units away from ``anchor``.

    Weeks start on ``week_start`` (``date.weekday()`` numbering). Months and
    quarters use floored arithmetic so negative offsets cross year boundaries.
    """

    unit = coerce_granularity(granularity)

    if unit is PeriodGranularity.DAY:
        day = anchor + timedelta(days=offset)
        period = DateRange(start=day, end=day)
    elif unit is PeriodGranularity.WEEK:
        back = (anchor.weekday() - week_start) % 7
        start = anchor - timedelta(days=back) + timedelta(weeks=offset)
        period = DateRange(start=start, end=start + timedelta(days=6))
    elif unit is PeriodGranularity.MONTH:
        period = _month_span(anchor.year, anchor.month - 1 + offset, 1)
    elif unit is PeriodGranularity.QUARTER:
        year_delta, quarter = divmod((anchor.month - 1) // 3 + offset, 4)
        period = _month_span(anchor.year + year_delta, quarter * 3, 3)
    elif unit is PeriodGranularity.YEAR:
        year = anchor.year + offset
        period = DateRange(start=date(year, 1, 1), end=date(year, 12, 31))
    else:
        raise InvalidGranularityError(f"Unhandled granularity {unit!r}.")

    logger.debug("Resolved %s offset=%d from %s to %s..%s", unit.value, offset, anchor, period.start, period.end)
    return period


def current_and_next(
    anchor: date,
    granularity: PeriodGranularity | str,
    *,
    week_start: int = MONDAY,
) -> tuple[DateRange, DateRange]:
    return (
        resolve_period(anchor, granularity, 0, week_start=week_start),
        resolve_period(anchor, granularity, 1, week_start=week_start),
    )


def bucket_entries(
    entries: Iterable[TimelineEntry],
    anchor: date,
    granularity: PeriodGranularity | str,
    *,
    week_start: int = MONDAY,
) -> PeriodBuckets:
    """Split timeline entries into the current and the following period.

    Entries keep their input order; entries outside both ranges are dropped.
    """

    current_range, next_range = current_and_next(anchor, granularity, week_start=week_start)
    buckets = PeriodBuckets(current=[], next=[])
    for entry in entries:
        if current_range.contains(entry.start_time):
            buckets.current.append(entry)
        elif next_range.contains(entry.start_time):
            buckets.next.append(entry)
    logger.debug("Bucketed timeline: %d current, %d next", len(buckets.current), len(buckets.next))
    return buckets
