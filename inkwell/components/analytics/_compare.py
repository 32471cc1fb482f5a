"""
PeriodComparator - last N days versus the N days before.

The current window is N calendar days ending today (inclusive). The
previous window is the N days immediately before it, with no gap and no
overlap. "Today" is the current UTC day of the injected clock.
"""

from __future__ import annotations

import math
from datetime import date, timedelta

from ._aggregate import StatsAggregator
from .models import DateRange, MetricChanges, PeriodComparison, StatsAggregate
from .ports import TimePort

# --- Window Arithmetic ---


def current_period(today: date, period_days: int) -> DateRange:
    """``[today - (period_days - 1), today + 1)``."""
    if period_days <= 0:
        msg = f"period_days must be > 0, got {period_days}"
        raise ValueError(msg)
    end = today + timedelta(days=1)
    return DateRange(start=end - timedelta(days=period_days), end=end)


def previous_period(current: DateRange, period_days: int) -> DateRange:
    """The ``period_days`` days ending where ``current`` starts."""
    return DateRange(start=current.start - timedelta(days=period_days), end=current.start)


# --- Comparator ---


class PeriodComparator:
    """Computes both window aggregates for the admin dashboard."""

    def __init__(self, aggregator: StatsAggregator, time_port: TimePort) -> None:
        self._aggregator = aggregator
        self._time = time_port

    def compare(self, period_days: int) -> PeriodComparison:
        current_range = current_period(self._time.today_utc(), period_days)
        previous_range = previous_period(current_range, period_days)

        current = self._aggregator.aggregate(current_range.start, current_range.end)
        previous = self._aggregator.aggregate(previous_range.start, previous_range.end)

        return PeriodComparison(
            period_days=period_days,
            current_range=current_range,
            previous_range=previous_range,
            current=current,
            previous=previous,
        )


# --- Percentage Change ---


_METRICS = {
    "page_views": "total_page_views",
    "unique_visitors": "total_unique_visitors",
    "bounce_rate": "avg_bounce_rate",
    "session_duration": "avg_session_duration",
}


def percentage_change(
    current: StatsAggregate | None,
    previous: StatsAggregate | None,
    metric: str = "total_page_views",
) -> float | None:
    """
    ``(current - previous) / previous * 100`` for one aggregate field.

    Not available (None) when either side has no data, when the previous
    window had zero page views, or when the metric's own previous value is
    zero. Never returns NaN or infinity.
    """
    if current is None or previous is None:
        return None
    if previous.total_page_views == 0:
        return None

    prev_value = float(getattr(previous, metric))
    curr_value = float(getattr(current, metric))
    if prev_value == 0:
        return None

    change = (curr_value - prev_value) / prev_value * 100
    if not math.isfinite(change):
        return None
    return change


def compare_metrics(comparison: PeriodComparison) -> MetricChanges:
    """Percentage change of every dashboard metric."""
    values = {
        name: percentage_change(comparison.current, comparison.previous, attr)
        for name, attr in _METRICS.items()
    }
    return MetricChanges(**values)
