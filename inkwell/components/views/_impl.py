"""In-memory view counter store and per-session view guard."""

import threading
from datetime import datetime, timedelta

from .ports import TimePort


class InMemoryViewCounterRepo:
    """Counters keyed by article id. Suitable for tests and single-process dev."""

    def __init__(self, counters: dict[int, int] | None = None) -> None:
        self._counters: dict[int, int] = dict(counters or {})
        self._lock = threading.Lock()

    def add_article(self, article_id: int, views: int = 0) -> None:
        with self._lock:
            self._counters[article_id] = views

    def remove_article(self, article_id: int) -> None:
        with self._lock:
            self._counters.pop(article_id, None)

    def get_views(self, article_id: int) -> int | None:
        with self._lock:
            return self._counters.get(article_id)

    def increment_views(self, article_id: int) -> int | None:
        with self._lock:
            if article_id not in self._counters:
                return None
            self._counters[article_id] += 1
            return self._counters[article_id]


class RecentViewGuard:
    """
    Remembers which viewer saw which article within a TTL window.

    Used by the HTTP layer so refreshes from the same browsing session do not
    inflate counters. Lives in process memory; entries expire lazily.
    """

    def __init__(self, ttl_seconds: int = 1800, time_port: TimePort | None = None) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._time = time_port
        self._seen: dict[tuple[str, int], datetime] = {}
        self._lock = threading.Lock()

    def _now(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        from inkwell.adapters.clock import SystemClock

        return SystemClock().now_utc()

    def should_count(self, viewer_key: str | None, article_id: int) -> bool:
        """True the first time a viewer sees an article within the window."""
        if not viewer_key:
            return True

        now = self._now()
        key = (viewer_key, article_id)
        with self._lock:
            seen_at = self._seen.get(key)
            if seen_at is not None and now - seen_at < self._ttl:
                return False
            self._seen[key] = now
            if len(self._seen) > 10_000:
                self._evict(now)
        return True

    def forget(self, viewer_key: str | None, article_id: int) -> None:
        """Drop a viewer's mark so the next view counts again."""
        if not viewer_key:
            return
        with self._lock:
            self._seen.pop((viewer_key, article_id), None)

    def _evict(self, now: datetime) -> None:
        expired = [k for k, t in self._seen.items() if now - t >= self._ttl]
        for k in expired:
            del self._seen[k]

    def clear(self) -> None:
        """Forget every viewer - useful for testing."""
        with self._lock:
            self._seen.clear()
