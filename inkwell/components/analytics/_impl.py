"""
In-memory event store for tests and local development.
"""

from __future__ import annotations

import threading
from datetime import date

from inkwell.domain.entities import DailyStat

from .models import DailyStatUpdate


class InMemoryEventStore:
    """DailyStat rows keyed by day. Upserts are serialized by a lock."""

    def __init__(self, rows: list[DailyStat] | None = None) -> None:
        self._rows: dict[date, DailyStat] = {}
        self._lock = threading.Lock()
        for row in rows or []:
            self._rows[row.date] = row

    def list_daily_stats(
        self,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[DailyStat]:
        with self._lock:
            rows = [
                r
                for r in self._rows.values()
                if (start is None or r.date >= start) and (end is None or r.date < end)
            ]
        rows.sort(key=lambda r: r.date, reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def upsert_daily_stat(self, day: date, update: DailyStatUpdate) -> DailyStat:
        with self._lock:
            existing = self._rows.get(day)
            if existing is None:
                stat = DailyStat(
                    date=day,
                    page_views=update.page_views,
                    unique_visitors=update.unique_visitors,
                    bounce_rate=update.bounce_rate or 0.0,
                    avg_session_duration=update.avg_session_duration or 0.0,
                )
            else:
                stat = DailyStat(
                    date=day,
                    page_views=existing.page_views + update.page_views,
                    unique_visitors=existing.unique_visitors + update.unique_visitors,
                    bounce_rate=(
                        update.bounce_rate
                        if update.bounce_rate is not None
                        else existing.bounce_rate
                    ),
                    avg_session_duration=(
                        update.avg_session_duration
                        if update.avg_session_duration is not None
                        else existing.avg_session_duration
                    ),
                )
            self._rows[day] = stat
            return stat
