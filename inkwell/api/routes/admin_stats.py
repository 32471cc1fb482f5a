"""
Admin dashboard statistics.

Compares the last N UTC days of site statistics with the N days before and
exposes the raw daily rows. Admin only.
"""

import logging
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from inkwell.adapters.clock import SystemClock
from inkwell.adapters.sqlite.repos import SQLiteStatsRepo
from inkwell.api.deps import (
    authorize,
    get_clock,
    get_current_actor,
    get_policy,
    get_rules,
    get_stats_repo,
)
from inkwell.api.schemas import (
    DailyStatResponse,
    DateRangeResponse,
    MetricChangesResponse,
    StatsAggregateResponse,
    StatsComparisonResponse,
)
from inkwell.components.analytics import (
    CompareStatsInput,
    ListDailyStatsInput,
    StatsAggregate,
    run_compare,
    run_list_daily,
)
from inkwell.domain.errors import StorageError
from inkwell.domain.policy import Action, Actor, DashboardStatsResource, PolicyEngine
from inkwell.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


def _aggregate(agg: StatsAggregate | None) -> StatsAggregateResponse | None:
    if agg is None:
        return None
    return StatsAggregateResponse(**asdict(agg))


@router.get("", response_model=StatsComparisonResponse)
def get_dashboard_stats(
    period_days: int | None = Query(None, ge=1, le=3660),
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    store: SQLiteStatsRepo = Depends(get_stats_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> StatsComparisonResponse:
    """
    Current vs previous window for the admin dashboard.

    Windows are contiguous and never overlap. A window with no rows is
    reported as null, and so is every percentage change that cannot be
    computed.
    """
    authorize(policy, actor, Action.READ, DashboardStatsResource())

    days = period_days or rules.analytics.comparison_window_days
    try:
        result = run_compare(CompareStatsInput(period_days=days), store=store, time_port=clock)
    except StorageError:
        logger.exception("Dashboard stats query failed")
        raise HTTPException(status_code=500, detail="Stats unavailable") from None

    if not result.success or result.comparison is None:
        message = result.errors[0].message if result.errors else "Invalid request"
        raise HTTPException(status_code=400, detail=message)

    comparison = result.comparison
    return StatsComparisonResponse(
        period_days=comparison.period_days,
        current_range=DateRangeResponse(
            start=comparison.current_range.start, end=comparison.current_range.end
        ),
        previous_range=DateRangeResponse(
            start=comparison.previous_range.start, end=comparison.previous_range.end
        ),
        current=_aggregate(comparison.current),
        previous=_aggregate(comparison.previous),
        changes=MetricChangesResponse(**asdict(result.changes)),
        has_data=comparison.current is not None,
    )


@router.get("/daily", response_model=list[DailyStatResponse])
def list_daily_stats(
    start: date | None = Query(None, description="First day, inclusive (UTC)"),
    end: date | None = Query(None, description="Last day, exclusive (UTC)"),
    limit: int = Query(366, ge=1, le=3660),
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    store: SQLiteStatsRepo = Depends(get_stats_repo),
) -> list[DailyStatResponse]:
    """Raw DailyStat rows, newest first."""
    authorize(policy, actor, Action.READ, DashboardStatsResource())

    try:
        result = run_list_daily(ListDailyStatsInput(start=start, end=end, limit=limit), store=store)
    except StorageError:
        logger.exception("Daily stats query failed")
        raise HTTPException(status_code=500, detail="Stats unavailable") from None

    if not result.success:
        raise HTTPException(status_code=400, detail=result.errors[0].message)
    return list(result.rows)  # type: ignore[arg-type,return-value]
