"""
Analytics component - DailyStat aggregation and period comparison.
"""

from ._aggregate import (
    StatsAggregator,
    StatsRecorder,
    fold_daily_stats,
    validate_update,
)
from ._compare import (
    PeriodComparator,
    compare_metrics,
    current_period,
    percentage_change,
    previous_period,
)
from ._impl import InMemoryEventStore
from .component import (
    run,
    run_compare,
    run_list_daily,
    run_record,
)
from .models import (
    AnalyticsValidationError,
    CompareStatsInput,
    CompareStatsOutput,
    DailyStatsOutput,
    DailyStatUpdate,
    DateRange,
    ListDailyStatsInput,
    MetricChanges,
    PeriodComparison,
    RecordDailyStatInput,
    RecordDailyStatOutput,
    StatsAggregate,
)
from .ports import EventStorePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_compare",
    "run_list_daily",
    "run_record",
    # Services
    "PeriodComparator",
    "StatsAggregator",
    "StatsRecorder",
    "InMemoryEventStore",
    # Functions
    "compare_metrics",
    "current_period",
    "fold_daily_stats",
    "percentage_change",
    "previous_period",
    "validate_update",
    # Models
    "AnalyticsValidationError",
    "CompareStatsInput",
    "CompareStatsOutput",
    "DailyStatUpdate",
    "DailyStatsOutput",
    "DateRange",
    "ListDailyStatsInput",
    "MetricChanges",
    "PeriodComparison",
    "RecordDailyStatInput",
    "RecordDailyStatOutput",
    "StatsAggregate",
    # Ports
    "EventStorePort",
    "TimePort",
]
