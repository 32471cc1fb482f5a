"""
StatsAggregator and StatsRecorder - read and write paths over DailyStat rows.

Key behaviors:
- Aggregates are folds over the rows in a half-open day range
- Page views and unique visitors are summed
- Bounce rate and session duration are a simple mean over days with data,
  not weighted by traffic
- No rows in range yields None, never a zero aggregate
- Writes add to counters and overwrite the day's averages (last writer wins)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from inkwell.domain.entities import DailyStat

from .models import AnalyticsValidationError, DailyStatUpdate, DateRange, StatsAggregate
from .ports import EventStorePort, TimePort

logger = logging.getLogger(__name__)


# --- Pure Fold ---


def fold_daily_stats(rows: Iterable[DailyStat]) -> StatsAggregate | None:
    """Fold DailyStat rows into one aggregate. Returns None for no rows."""
    total_views = 0
    total_visitors = 0
    bounce_sum = 0.0
    duration_sum = 0.0
    count = 0

    for row in rows:
        total_views += row.page_views
        total_visitors += row.unique_visitors
        bounce_sum += row.bounce_rate
        duration_sum += row.avg_session_duration
        count += 1

    if count == 0:
        return None

    return StatsAggregate(
        total_page_views=total_views,
        total_unique_visitors=total_visitors,
        avg_bounce_rate=bounce_sum / count,
        avg_session_duration=duration_sum / count,
        days_with_data=count,
    )


# --- Read Path ---


class StatsAggregator:
    """Aggregates DailyStat rows over a date range."""

    def __init__(self, store: EventStorePort) -> None:
        self._store = store

    def aggregate(self, start_inclusive: date, end_exclusive: date) -> StatsAggregate | None:
        """
        Aggregate rows with ``start_inclusive <= date < end_exclusive``.

        An empty or inverted range returns None without touching storage.
        StorageError from the store propagates.
        """
        window = DateRange(start_inclusive, end_exclusive)
        if window.is_empty:
            return None

        rows = self._store.list_daily_stats(start=window.start, end=window.end)
        in_range = [r for r in rows if window.contains(r.date)]
        return fold_daily_stats(in_range)


# --- Write Path ---


def validate_update(update: DailyStatUpdate) -> list[AnalyticsValidationError]:
    """Validate a DailyStat write."""
    errors: list[AnalyticsValidationError] = []

    if update.page_views < 0:
        errors.append(
            AnalyticsValidationError(
                code="negative_increment",
                message="page_views increment must be >= 0",
                field_name="page_views",
            )
        )
    if update.unique_visitors < 0:
        errors.append(
            AnalyticsValidationError(
                code="negative_increment",
                message="unique_visitors increment must be >= 0",
                field_name="unique_visitors",
            )
        )
    if update.bounce_rate is not None and not 0.0 <= update.bounce_rate <= 100.0:
        errors.append(
            AnalyticsValidationError(
                code="out_of_range",
                message="bounce_rate must be between 0 and 100",
                field_name="bounce_rate",
            )
        )
    if update.avg_session_duration is not None and update.avg_session_duration < 0:
        errors.append(
            AnalyticsValidationError(
                code="out_of_range",
                message="avg_session_duration must be >= 0",
                field_name="avg_session_duration",
            )
        )

    return errors


class StatsRecorder:
    """Writes events into the DailyStat row of their UTC day."""

    def __init__(self, store: EventStorePort, time_port: TimePort) -> None:
        self._store = store
        self._time = time_port

    def record(
        self, update: DailyStatUpdate
    ) -> tuple[DailyStat | None, list[AnalyticsValidationError]]:
        """Apply one update. Returns the stored row or validation errors."""
        errors = validate_update(update)
        if errors:
            return None, errors

        day = update.day or self._time.today_utc()
        stat = self._store.upsert_daily_stat(day, update)
        logger.debug(
            "Recorded site stats for %s: +%d views, +%d visitors",
            day.isoformat(),
            update.page_views,
            update.unique_visitors,
        )
        return stat, []
