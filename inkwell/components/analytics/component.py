"""
Analytics component - Site statistics aggregation and comparison.

Turns raw events into DailyStat rows, folds rows into aggregates over date
ranges and compares the last N days with the N days before.

Invariants:
- I1: At most one DailyStat row per UTC calendar day
- I2: Counter writes are single atomic storage operations
- I3: "No data" (None) is never reported as a zero aggregate
- I4: Percentage change is None, never 0/NaN/inf, when undefined
"""

from __future__ import annotations

from ._aggregate import StatsAggregator, StatsRecorder
from ._compare import PeriodComparator, compare_metrics
from .models import (
    AnalyticsValidationError,
    CompareStatsInput,
    CompareStatsOutput,
    DailyStatsOutput,
    ListDailyStatsInput,
    RecordDailyStatInput,
    RecordDailyStatOutput,
)
from .ports import EventStorePort, TimePort

# --- Component Entry Points ---


def run_compare(
    inp: CompareStatsInput,
    *,
    store: EventStorePort,
    time_port: TimePort,
) -> CompareStatsOutput:
    """
    Compare the last ``period_days`` days with the preceding window.

    Args:
        inp: Input containing the window length in days.
        store: Event store port.
        time_port: Clock used to anchor "today".

    Returns:
        CompareStatsOutput with both aggregates and per-metric changes.

    Raises:
        StorageError: if the store cannot be read.
    """
    if inp.period_days <= 0:
        return CompareStatsOutput(
            comparison=None,
            errors=[
                AnalyticsValidationError(
                    code="invalid_period",
                    message="period_days must be greater than 0",
                    field_name="period_days",
                )
            ],
            success=False,
        )

    comparator = PeriodComparator(StatsAggregator(store), time_port)
    comparison = comparator.compare(inp.period_days)
    return CompareStatsOutput(comparison=comparison, changes=compare_metrics(comparison))


def run_record(
    inp: RecordDailyStatInput,
    *,
    store: EventStorePort,
    time_port: TimePort,
) -> RecordDailyStatOutput:
    """Apply one DailyStat write (counters added, averages overwritten)."""
    stat, errors = StatsRecorder(store, time_port).record(inp.update)
    return RecordDailyStatOutput(stat=stat, errors=errors, success=not errors)


def run_list_daily(
    inp: ListDailyStatsInput,
    *,
    store: EventStorePort,
) -> DailyStatsOutput:
    """List raw DailyStat rows, newest first."""
    if inp.limit <= 0:
        return DailyStatsOutput(
            rows=(),
            errors=[
                AnalyticsValidationError(
                    code="invalid_limit",
                    message="limit must be greater than 0",
                    field_name="limit",
                )
            ],
            success=False,
        )
    rows = store.list_daily_stats(start=inp.start, end=inp.end, limit=inp.limit)
    return DailyStatsOutput(rows=tuple(rows))


def run(
    inp: CompareStatsInput | RecordDailyStatInput | ListDailyStatsInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
) -> CompareStatsOutput | RecordDailyStatOutput | DailyStatsOutput:
    if isinstance(inp, CompareStatsInput):
        assert time_port
        return run_compare(inp, store=store, time_port=time_port)

    elif isinstance(inp, RecordDailyStatInput):
        assert time_port
        return run_record(inp, store=store, time_port=time_port)

    elif isinstance(inp, ListDailyStatsInput):
        return run_list_daily(inp, store=store)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
