"""
Counters under concurrent writers.

N threads increment the same counter; the final value must be exactly the
starting value plus N, and every writer must see a distinct new value.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from inkwell.adapters.sqlite.repos import SQLiteArticleRepo, SQLiteStatsRepo
from inkwell.components.analytics import DailyStatUpdate, InMemoryEventStore
from inkwell.components.views import InMemoryViewCounterRepo, ViewCounter

N_VALUES = [2, 10, 100]


def _hammer(fn, n: int) -> list:
    with ThreadPoolExecutor(max_workers=min(n, 16)) as pool:
        return list(pool.map(lambda _: fn(), range(n)))


@pytest.mark.parametrize("n", N_VALUES)
def test_sqlite_article_views(db_path, authored_article, n):
    repo = SQLiteArticleRepo(db_path, timeout=30)
    counter = ViewCounter(repo)

    results = _hammer(lambda: counter.increment(authored_article.id), n)

    assert repo.get_views(authored_article.id) == n
    assert sorted(results) == list(range(1, n + 1))


@pytest.mark.parametrize("n", N_VALUES)
def test_in_memory_article_views(n):
    repo = InMemoryViewCounterRepo({1: 5})
    counter = ViewCounter(repo)

    _hammer(lambda: counter.increment(1), n)

    assert repo.get_views(1) == 5 + n


@pytest.mark.parametrize("n", N_VALUES)
def test_sqlite_daily_stat_upserts(db_path, n):
    store = SQLiteStatsRepo(db_path, timeout=30)
    day = date(2024, 6, 1)

    update = DailyStatUpdate(page_views=1, unique_visitors=1)
    _hammer(lambda: store.upsert_daily_stat(day, update), n)

    rows = store.list_daily_stats()
    assert len(rows) == 1
    assert rows[0].page_views == n
    assert rows[0].unique_visitors == n


@pytest.mark.parametrize("n", N_VALUES)
def test_in_memory_daily_stat_upserts(n):
    store = InMemoryEventStore()
    day = date(2024, 6, 1)

    _hammer(lambda: store.upsert_daily_stat(day, DailyStatUpdate(page_views=1)), n)

    assert store.list_daily_stats()[0].page_views == n
