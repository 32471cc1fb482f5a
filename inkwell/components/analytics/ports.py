"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from inkwell.domain.entities import DailyStat

from .models import DailyStatUpdate


class EventStorePort(Protocol):
    """Durable store of DailyStat rows, one per calendar day."""

    def list_daily_stats(
        self,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[DailyStat]:
        """Rows with ``start <= date < end``, newest first. Raises StorageError."""
        ...

    def upsert_daily_stat(self, day: date, update: DailyStatUpdate) -> DailyStat:
        """
        Apply ``update`` to the row for ``day`` in one atomic operation,
        creating the row if missing. Raises StorageError.
        """
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

    def today_utc(self) -> date:
        """Get the current UTC calendar day."""
        ...
