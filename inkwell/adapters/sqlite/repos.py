from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, date, datetime
from typing import Any

from inkwell.components.analytics.models import DailyStatUpdate
from inkwell.domain.entities import (
    Article,
    Category,
    ContactMessage,
    DailyStat,
    Subscriber,
    User,
)
from inkwell.domain.errors import ConflictError, StorageError

DEFAULT_TIMEOUT_SECONDS = 5.0


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def parse_dt(s: str | None) -> datetime | None:
    if not s:
        return None
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


class _SQLiteRepo:
    def __init__(self, db_path: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection scoped to one unit of work. sqlite3 errors become StorageError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise ConflictError(str(e)) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


# --- Users ---


class SQLiteUserRepo(_SQLiteRepo):
    def _to_user(self, row: dict[str, Any]) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            display_name=row["display_name"],
            password_hash=row["password_hash"],
            role=row["role"],
            status=row["status"],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
        )

    def save(self, user: User) -> User:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users (id, email, display_name, password_hash, role, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    display_name=excluded.display_name,
                    password_hash=excluded.password_hash,
                    role=excluded.role,
                    status=excluded.status
                """,
                (
                    str(user.id),
                    user.email,
                    user.display_name,
                    user.password_hash,
                    user.role,
                    user.status,
                    user.created_at.isoformat(),
                ),
            )
        return user

    def get_by_id(self, user_id: str) -> User | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        return self._to_user(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE lower(email) = lower(?)", (email,)
            ).fetchone()
        return self._to_user(row) if row else None

    def list_all(self) -> list[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at ASC").fetchall()
        return [self._to_user(r) for r in rows]


# --- Categories ---


class SQLiteCategoryRepo(_SQLiteRepo):
    _FIELDS = ("name", "slug", "description", "icon", "gradient", "image")

    def _to_category(self, row: dict[str, Any]) -> Category:
        return Category(**row)

    def list_all(self) -> list[Category]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM categories ORDER BY name ASC").fetchall()
        return [self._to_category(r) for r in rows]

    def get_by_id(self, category_id: int) -> Category | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM categories WHERE id = ?", (category_id,)).fetchone()
        return self._to_category(row) if row else None

    def get_by_slug(self, slug: str) -> Category | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM categories WHERE slug = ?", (slug,)).fetchone()
        return self._to_category(row) if row else None

    def create(self, category: Category) -> Category:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO categories (name, slug, description, icon, gradient, image)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    category.name,
                    category.slug,
                    category.description,
                    category.icon,
                    category.gradient,
                    category.image,
                ),
            )
            new_id = cursor.lastrowid
        return category.model_copy(update={"id": new_id})

    def update(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        fields = {k: v for k, v in changes.items() if k in self._FIELDS}
        if fields:
            assignments = ", ".join(f"{k} = ?" for k in fields)
            with self._connect() as conn:
                conn.execute(
                    f"UPDATE categories SET {assignments} WHERE id = ?",
                    (*fields.values(), category_id),
                )
        return self.get_by_id(category_id)

    def delete(self, category_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            return cursor.rowcount > 0


# --- Articles ---


class SQLiteArticleRepo(_SQLiteRepo):
    _FIELDS = (
        "title",
        "slug",
        "summary",
        "content",
        "image",
        "category_id",
        "tags",
        "featured",
    )

    def _to_article(self, row: dict[str, Any]) -> Article:
        now = datetime.now(UTC)
        return Article(
            id=row["id"],
            title=row["title"],
            slug=row["slug"],
            summary=row["summary"],
            content=row["content"],
            image=row["image"],
            category_id=row["category_id"],
            author_id=row["author_id"],
            tags=json.loads(row["tags_json"] or "[]"),
            featured=bool(row["featured"]),
            views=row["views"],
            published_at=parse_dt(row["published_at"]) or now,
            created_at=parse_dt(row["created_at"]) or now,
            updated_at=parse_dt(row["updated_at"]) or now,
        )

    def _select(
        self, where: str = "1=1", params: tuple[Any, ...] = (), suffix: str = ""
    ) -> list[Article]:
        query = f"SELECT a.* FROM articles a WHERE {where} {suffix}"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._to_article(r) for r in rows]

    def create(self, article: Article) -> Article:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO articles (
                    title, slug, summary, content, image, category_id, author_id,
                    tags_json, featured, views, published_at, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    article.title,
                    article.slug,
                    article.summary,
                    article.content,
                    article.image,
                    article.category_id,
                    article.author_id,
                    json.dumps(article.tags),
                    int(article.featured),
                    article.published_at.isoformat(),
                    article.created_at.isoformat(),
                    article.updated_at.isoformat(),
                ),
            )
            new_id = cursor.lastrowid
        return article.model_copy(update={"id": new_id, "views": 0})

    def get_by_id(self, article_id: int) -> Article | None:
        items = self._select("a.id = ?", (article_id,))
        return items[0] if items else None

    def get_by_slug(self, slug: str) -> Article | None:
        items = self._select("a.slug = ?", (slug,))
        return items[0] if items else None

    def list(self, limit: int = 50, offset: int = 0) -> list[Article]:
        return self._select(
            suffix="ORDER BY a.published_at DESC LIMIT ? OFFSET ?", params=(limit, offset)
        )

    def list_featured(self, limit: int = 6) -> list[Article]:
        return self._select(
            "a.featured = 1", suffix="ORDER BY a.published_at DESC LIMIT ?", params=(limit,)
        )

    def list_by_category_slug(self, slug: str) -> list[Article]:
        return self._select(
            "a.category_id IN (SELECT id FROM categories WHERE slug = ?)",
            (slug,),
            suffix="ORDER BY a.published_at DESC",
        )

    def search(self, query: str, limit: int = 20) -> list[Article]:
        pattern = f"%{query}%"
        return self._select(
            "(a.title LIKE ? OR a.summary LIKE ? OR a.content LIKE ?)",
            (pattern, pattern, pattern, limit),
            suffix="ORDER BY a.published_at DESC LIMIT ?",
        )

    def update(self, article_id: int, changes: dict[str, Any]) -> Article | None:
        fields = {k: v for k, v in changes.items() if k in self._FIELDS}
        if "tags" in fields:
            fields["tags_json"] = json.dumps(fields.pop("tags"))
        if "featured" in fields:
            fields["featured"] = int(fields["featured"])
        if fields:
            fields["updated_at"] = datetime.now(UTC).isoformat()
            assignments = ", ".join(f"{k} = ?" for k in fields)
            with self._connect() as conn:
                conn.execute(
                    f"UPDATE articles SET {assignments} WHERE id = ?",
                    (*fields.values(), article_id),
                )
        return self.get_by_id(article_id)

    def delete(self, article_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM articles WHERE id = ?", (article_id,))
            return cursor.rowcount > 0

    def increment_views(self, article_id: int) -> int | None:
        """Single UPDATE evaluated by SQLite; concurrent callers never lose an increment."""
        with self._connect() as conn:
            rows = conn.execute(
                "UPDATE articles SET views = views + 1 WHERE id = ? RETURNING views",
                (article_id,),
            ).fetchall()
        return rows[0]["views"] if rows else None

    def get_views(self, article_id: int) -> int | None:
        with self._connect() as conn:
            row = conn.execute("SELECT views FROM articles WHERE id = ?", (article_id,)).fetchone()
        return row["views"] if row else None


# --- Newsletter & Contact ---


class SQLiteSubscriberRepo(_SQLiteRepo):
    def _to_subscriber(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            id=row["id"],
            email=row["email"],
            active=bool(row["active"]),
            created_at=parse_dt(row["created_at"]) or datetime.now(UTC),
        )

    def list_all(self) -> list[Subscriber]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM subscribers ORDER BY created_at DESC").fetchall()
        return [self._to_subscriber(r) for r in rows]

    def subscribe(self, email: str) -> Subscriber:
        """Insert a subscriber, or re-activate an existing one."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO subscribers (email, active, created_at) VALUES (?, 1, ?)
                ON CONFLICT(email) DO UPDATE SET active = 1
                """,
                (email, datetime.now(UTC).isoformat()),
            )
            row = conn.execute("SELECT * FROM subscribers WHERE email = ?", (email,)).fetchone()
        return self._to_subscriber(row)


class SQLiteMessageRepo(_SQLiteRepo):
    def _to_message(self, row: dict[str, Any]) -> ContactMessage:
        return ContactMessage(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            subject=row["subject"],
            message=row["message"],
            read=bool(row["read"]),
            created_at=parse_dt(row["created_at"]) or datetime.now(UTC),
        )

    def list_all(self) -> list[ContactMessage]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM contact_messages ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [self._to_message(r) for r in rows]

    def create(self, message: ContactMessage) -> ContactMessage:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO contact_messages (name, email, subject, message, read, created_at)
                VALUES (?, ?, ?, ?, 0, ?)
                """,
                (
                    message.name,
                    message.email,
                    message.subject,
                    message.message,
                    message.created_at.isoformat(),
                ),
            )
            new_id = cursor.lastrowid
        return message.model_copy(update={"id": new_id, "read": False})

    def mark_read(self, message_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE contact_messages SET read = 1 WHERE id = ?", (message_id,)
            )
            return cursor.rowcount > 0


# --- Site Statistics ---


class SQLiteStatsRepo(_SQLiteRepo):
    """EventStorePort over the ``site_stats`` table."""

    def _to_stat(self, row: dict[str, Any]) -> DailyStat:
        return DailyStat(
            date=date.fromisoformat(row["date"]),
            page_views=row["page_views"],
            unique_visitors=row["unique_visitors"],
            bounce_rate=row["bounce_rate"],
            avg_session_duration=row["avg_session_duration"],
        )

    def list_daily_stats(
        self,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[DailyStat]:
        query = "SELECT * FROM site_stats WHERE 1=1"
        params: list[Any] = []
        if start is not None:
            query += " AND date >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND date < ?"
            params.append(end.isoformat())
        query += " ORDER BY date DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._to_stat(r) for r in rows]

    def upsert_daily_stat(self, day: date, update: DailyStatUpdate) -> DailyStat:
        """
        Counters are added server-side; averages are replaced only when given.
        One statement, so concurrent writers on the same day never lose counts.
        """
        with self._connect() as conn:
            rows = conn.execute(
                """
                INSERT INTO site_stats (
                    date, page_views, unique_visitors, bounce_rate, avg_session_duration
                )
                VALUES (?, ?, ?, COALESCE(?, 0), COALESCE(?, 0))
                ON CONFLICT(date) DO UPDATE SET
                    page_views = site_stats.page_views + excluded.page_views,
                    unique_visitors = site_stats.unique_visitors + excluded.unique_visitors,
                    bounce_rate = COALESCE(?, site_stats.bounce_rate),
                    avg_session_duration = COALESCE(?, site_stats.avg_session_duration)
                RETURNING *
                """,
                (
                    day.isoformat(),
                    update.page_views,
                    update.unique_visitors,
                    update.bounce_rate,
                    update.avg_session_duration,
                    update.bounce_rate,
                    update.avg_session_duration,
                ),
            ).fetchall()
        return self._to_stat(rows[0])
