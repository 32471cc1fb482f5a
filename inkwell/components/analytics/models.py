"""
Analytics component input/output models.

All dates are UTC calendar days. Ranges are half-open: ``[start, end)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from inkwell.domain.entities import DailyStat

# --- Validation Error ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Value Models ---


@dataclass(frozen=True)
class DateRange:
    """Half-open range of calendar days."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return max((self.end - self.start).days, 0)

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    @property
    def last_day(self) -> date:
        """Last day included in the range."""
        return self.end - timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


@dataclass(frozen=True)
class StatsAggregate:
    """Fold of the DailyStat rows in one date range."""

    total_page_views: int
    total_unique_visitors: int
    avg_bounce_rate: float
    avg_session_duration: float
    days_with_data: int = 0


@dataclass(frozen=True)
class PeriodComparison:
    """Current and previous window aggregates. ``None`` means no data."""

    period_days: int
    current_range: DateRange
    previous_range: DateRange
    current: StatsAggregate | None
    previous: StatsAggregate | None


@dataclass(frozen=True)
class MetricChanges:
    """Percentage change per metric. ``None`` means not available."""

    page_views: float | None = None
    unique_visitors: float | None = None
    bounce_rate: float | None = None
    session_duration: float | None = None


@dataclass(frozen=True)
class DailyStatUpdate:
    """
    One write against a day's DailyStat row.

    Counters are added to the stored values. The two averages, when given,
    replace the stored values for the day.
    """

    day: date | None = None
    page_views: int = 0
    unique_visitors: int = 0
    bounce_rate: float | None = None
    avg_session_duration: float | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CompareStatsInput:
    """Input for comparing the last N days with the N days before."""

    period_days: int


@dataclass(frozen=True)
class RecordDailyStatInput:
    """Input for writing to today's (or a given day's) DailyStat row."""

    update: DailyStatUpdate


@dataclass(frozen=True)
class ListDailyStatsInput:
    """Input for listing raw DailyStat rows, newest first."""

    start: date | None = None
    end: date | None = None
    limit: int = 366


# --- Output Models ---


@dataclass(frozen=True)
class CompareStatsOutput:
    """Output for a period comparison."""

    comparison: PeriodComparison | None
    changes: MetricChanges = field(default_factory=MetricChanges)
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RecordDailyStatOutput:
    """Output for a DailyStat write."""

    stat: DailyStat | None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DailyStatsOutput:
    """Output for the raw daily series."""

    rows: tuple[DailyStat, ...]
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True
