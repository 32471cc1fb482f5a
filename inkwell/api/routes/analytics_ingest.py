"""
Page view ingestion.

Public endpoint the site frontend calls once per page load. Each call adds
one page view to today's DailyStat row; the first call of the UTC day from a
browser also adds one unique visitor.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from inkwell.adapters.clock import SystemClock
from inkwell.adapters.sqlite.repos import SQLiteStatsRepo
from inkwell.api.deps import get_clock, get_rules, get_stats_repo
from inkwell.api.schemas import PageViewRequest
from inkwell.components.analytics import DailyStatUpdate, RecordDailyStatInput, run_record
from inkwell.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()

SEEN_COOKIE = "inkwell_seen"


class PageViewResponse(BaseModel):
    ok: bool = True
    counted: bool


@router.post("/pageview", response_model=PageViewResponse, status_code=status.HTTP_202_ACCEPTED)
def ingest_page_view(
    request: Request,
    response: Response,
    req: PageViewRequest | None = None,
    store: SQLiteStatsRepo = Depends(get_stats_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PageViewResponse:
    if not rules.analytics.record_page_views:
        return PageViewResponse(counted=False)

    today = clock.today_utc()
    first_visit_today = request.cookies.get(SEEN_COOKIE) != today.isoformat()

    update = DailyStatUpdate(
        day=today,
        page_views=1,
        unique_visitors=1 if first_visit_today else 0,
        bounce_rate=req.bounce_rate if req else None,
        avg_session_duration=req.avg_session_duration if req else None,
    )
    result = run_record(RecordDailyStatInput(update=update), store=store, time_port=clock)
    if not result.success:
        raise HTTPException(
            status_code=400,
            detail=[
                {"code": e.code, "message": e.message, "field": e.field_name}
                for e in result.errors
            ],
        )

    if first_visit_today:
        response.set_cookie(
            key=SEEN_COOKIE,
            value=today.isoformat(),
            max_age=24 * 60 * 60,
            httponly=True,
            samesite="lax",
        )
    return PageViewResponse(counted=True)
