"""
Analytics component unit tests.

Tests for DailyStat aggregation, the write path and period comparison.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from inkwell.components.analytics import (
    CompareStatsInput,
    DailyStatUpdate,
    InMemoryEventStore,
    ListDailyStatsInput,
    PeriodComparator,
    RecordDailyStatInput,
    StatsAggregator,
    run,
    run_compare,
    run_list_daily,
    run_record,
)
from inkwell.domain.entities import DailyStat

# --- Mock Implementations ---


class MockTimePort:
    """Mock time port for deterministic testing."""

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._time

    def today_utc(self) -> date:
        return self._time.date()


def stat(day: date, views: int, visitors: int = 0, bounce: float = 0.0, duration: float = 0.0):
    return DailyStat(
        date=day,
        page_views=views,
        unique_visitors=visitors,
        bounce_rate=bounce,
        avg_session_duration=duration,
    )


TODAY = date(2024, 6, 15)


# --- Fixtures ---


@pytest.fixture
def time_port() -> MockTimePort:
    return MockTimePort()


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


# --- Aggregator Tests ---


class TestStatsAggregator:
    def test_sums_counters_and_averages_rates(self) -> None:
        store = InMemoryEventStore(
            [
                stat(date(2024, 6, 1), 100, 40, bounce=50.0, duration=100.0),
                stat(date(2024, 6, 2), 300, 60, bounce=30.0, duration=200.0),
            ]
        )
        agg = StatsAggregator(store).aggregate(date(2024, 6, 1), date(2024, 6, 3))

        assert agg is not None
        assert agg.total_page_views == 400
        assert agg.total_unique_visitors == 100
        assert agg.avg_bounce_rate == pytest.approx(40.0)
        assert agg.avg_session_duration == pytest.approx(150.0)
        assert agg.days_with_data == 2

    def test_rates_are_not_weighted_by_traffic(self) -> None:
        store = InMemoryEventStore(
            [
                stat(date(2024, 6, 1), 1, bounce=100.0),
                stat(date(2024, 6, 2), 1000, bounce=0.0),
            ]
        )
        agg = StatsAggregator(store).aggregate(date(2024, 6, 1), date(2024, 6, 3))

        assert agg is not None
        assert agg.avg_bounce_rate == pytest.approx(50.0)

    def test_no_rows_is_none_not_zero(self, store: InMemoryEventStore) -> None:
        assert StatsAggregator(store).aggregate(date(2024, 6, 1), date(2024, 6, 8)) is None

    def test_range_is_half_open(self) -> None:
        store = InMemoryEventStore(
            [
                stat(date(2024, 6, 1), 10),
                stat(date(2024, 6, 8), 99),
            ]
        )
        agg = StatsAggregator(store).aggregate(date(2024, 6, 1), date(2024, 6, 8))

        assert agg is not None
        assert agg.total_page_views == 10

    @pytest.mark.parametrize(
        "start,end",
        [
            (date(2024, 6, 5), date(2024, 6, 5)),
            (date(2024, 6, 5), date(2024, 6, 1)),
        ],
    )
    def test_empty_or_inverted_range(self, start: date, end: date) -> None:
        store = InMemoryEventStore([stat(date(2024, 6, 3), 10)])
        assert StatsAggregator(store).aggregate(start, end) is None

    def test_zero_rows_still_count_as_data(self) -> None:
        store = InMemoryEventStore([stat(date(2024, 6, 1), 0)])
        agg = StatsAggregator(store).aggregate(date(2024, 6, 1), date(2024, 6, 2))

        assert agg is not None
        assert agg.total_page_views == 0
        assert agg.days_with_data == 1


# --- Recorder Tests ---


class TestRecordDailyStat:
    def test_creates_row_for_today(
        self, store: InMemoryEventStore, time_port: MockTimePort
    ) -> None:
        result = run_record(
            RecordDailyStatInput(update=DailyStatUpdate(page_views=3, unique_visitors=1)),
            store=store,
            time_port=time_port,
        )

        assert result.success
        assert result.stat is not None
        assert result.stat.date == TODAY
        assert result.stat.page_views == 3

    def test_counters_accumulate(self, store: InMemoryEventStore, time_port: MockTimePort) -> None:
        for _ in range(5):
            run_record(
                RecordDailyStatInput(update=DailyStatUpdate(page_views=2, unique_visitors=1)),
                store=store,
                time_port=time_port,
            )

        rows = store.list_daily_stats()
        assert len(rows) == 1
        assert rows[0].page_views == 10
        assert rows[0].unique_visitors == 5

    def test_averages_are_last_writer_wins(
        self, store: InMemoryEventStore, time_port: MockTimePort
    ) -> None:
        run_record(
            RecordDailyStatInput(update=DailyStatUpdate(page_views=1, bounce_rate=80.0)),
            store=store,
            time_port=time_port,
        )
        run_record(
            RecordDailyStatInput(update=DailyStatUpdate(page_views=1, bounce_rate=20.0)),
            store=store,
            time_port=time_port,
        )
        run_record(
            RecordDailyStatInput(update=DailyStatUpdate(page_views=1)),
            store=store,
            time_port=time_port,
        )

        row = store.list_daily_stats()[0]
        assert row.bounce_rate == 20.0
        assert row.page_views == 3

    def test_explicit_day(self, store: InMemoryEventStore, time_port: MockTimePort) -> None:
        day = date(2024, 1, 1)
        result = run_record(
            RecordDailyStatInput(update=DailyStatUpdate(day=day, page_views=1)),
            store=store,
            time_port=time_port,
        )
        assert result.stat is not None
        assert result.stat.date == day

    @pytest.mark.parametrize(
        "update,field",
        [
            (DailyStatUpdate(page_views=-1), "page_views"),
            (DailyStatUpdate(unique_visitors=-1), "unique_visitors"),
            (DailyStatUpdate(bounce_rate=101.0), "bounce_rate"),
            (DailyStatUpdate(avg_session_duration=-5.0), "avg_session_duration"),
        ],
    )
    def test_invalid_updates_are_rejected(
        self,
        store: InMemoryEventStore,
        time_port: MockTimePort,
        update: DailyStatUpdate,
        field: str,
    ) -> None:
        result = run_record(RecordDailyStatInput(update=update), store=store, time_port=time_port)

        assert not result.success
        assert result.stat is None
        assert result.errors[0].field_name == field
        assert store.list_daily_stats() == []


# --- Comparison Tests ---


class TestPeriodComparison:
    def test_windows_are_contiguous_and_disjoint(
        self, store: InMemoryEventStore, time_port: MockTimePort
    ) -> None:
        comparison = PeriodComparator(StatsAggregator(store), time_port).compare(7)

        assert comparison.current_range.start == date(2024, 6, 9)
        assert comparison.current_range.last_day == TODAY
        assert comparison.previous_range.start == date(2024, 6, 2)
        assert comparison.previous_range.end == comparison.current_range.start
        assert comparison.current_range.days == 7
        assert comparison.previous_range.days == 7

    def test_day_belongs_to_exactly_one_window(self, time_port: MockTimePort) -> None:
        # One row per day covering both windows and a bit beyond.
        rows = [stat(TODAY - timedelta(days=i), 1) for i in range(20)]
        result = run_compare(
            CompareStatsInput(period_days=7),
            store=InMemoryEventStore(rows),
            time_port=time_port,
        )

        assert result.comparison is not None
        assert result.comparison.current is not None
        assert result.comparison.previous is not None
        assert result.comparison.current.total_page_views == 7
        assert result.comparison.previous.total_page_views == 7

    def test_future_rows_are_ignored(self, time_port: MockTimePort) -> None:
        rows = [stat(TODAY, 5), stat(TODAY + timedelta(days=1), 1000)]
        result = run_compare(
            CompareStatsInput(period_days=7),
            store=InMemoryEventStore(rows),
            time_port=time_port,
        )

        assert result.comparison is not None
        assert result.comparison.current is not None
        assert result.comparison.current.total_page_views == 5

    def test_changes_computed(self, time_port: MockTimePort) -> None:
        rows = [
            stat(TODAY, 150, 30, bounce=40.0, duration=90.0),
            stat(TODAY - timedelta(days=7), 100, 20, bounce=50.0, duration=60.0),
        ]
        result = run_compare(
            CompareStatsInput(period_days=7),
            store=InMemoryEventStore(rows),
            time_port=time_port,
        )

        assert result.changes.page_views == pytest.approx(50.0)
        assert result.changes.unique_visitors == pytest.approx(50.0)
        assert result.changes.bounce_rate == pytest.approx(-20.0)
        assert result.changes.session_duration == pytest.approx(50.0)

    def test_no_previous_data_means_no_change(self, time_port: MockTimePort) -> None:
        result = run_compare(
            CompareStatsInput(period_days=7),
            store=InMemoryEventStore([stat(TODAY, 10)]),
            time_port=time_port,
        )

        assert result.comparison is not None
        assert result.comparison.previous is None
        assert result.changes.page_views is None
        assert result.changes.bounce_rate is None

    @pytest.mark.parametrize("period_days", [0, -3])
    def test_non_positive_period_is_rejected(
        self, store: InMemoryEventStore, time_port: MockTimePort, period_days: int
    ) -> None:
        result = run_compare(
            CompareStatsInput(period_days=period_days), store=store, time_port=time_port
        )

        assert not result.success
        assert result.comparison is None
        assert result.errors[0].code == "invalid_period"


# --- Listing and Dispatch ---


class TestListDaily:
    def test_newest_first_with_limit(self) -> None:
        rows = [stat(TODAY - timedelta(days=i), i) for i in range(5)]
        result = run_list_daily(ListDailyStatsInput(limit=3), store=InMemoryEventStore(rows))

        assert result.success
        assert [r.date for r in result.rows] == [TODAY - timedelta(days=i) for i in range(3)]

    def test_invalid_limit(self, store: InMemoryEventStore) -> None:
        result = run_list_daily(ListDailyStatsInput(limit=0), store=store)
        assert not result.success
        assert result.errors[0].code == "invalid_limit"


def test_run_dispatches_by_input_type(
    store: InMemoryEventStore, time_port: MockTimePort
) -> None:
    recorded = run(
        RecordDailyStatInput(update=DailyStatUpdate(page_views=1)),
        store=store,
        time_port=time_port,
    )
    listed = run(ListDailyStatsInput(), store=store)

    assert recorded.success
    assert len(listed.rows) == 1  # type: ignore[union-attr]

    with pytest.raises(ValueError):
        run("bogus", store=store)  # type: ignore[arg-type]
