"""
Forward-only SQL migrations.

Each ``NNNN_name.sql`` file holds an Up script, optionally followed by a
``-- Down`` section that is kept for manual rollbacks and never executed.
Applied filenames are recorded in ``schema_migrations``.
"""

import logging
import sqlite3
from pathlib import Path

from inkwell.domain.errors import StorageError

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"

_LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    filename TEXT PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
)
"""


def up_script(path: Path) -> str:
    head, _, _ = path.read_text().partition(DOWN_MARKER)
    return head


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute(_LEDGER_DDL)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
        return conn

    def _scripts(self) -> list[Path]:
        if not self.migrations_dir.is_dir():
            raise StorageError(f"Migrations directory not found: {self.migrations_dir}")
        return sorted(self.migrations_dir.glob("*.sql"))

    @staticmethod
    def _recorded(conn: sqlite3.Connection) -> set[str]:
        return {row[0] for row in conn.execute("SELECT filename FROM schema_migrations")}

    def pending(self) -> list[str]:
        """Filenames not yet applied, in the order they would run."""
        conn = self._connect()
        try:
            recorded = self._recorded(conn)
        finally:
            conn.close()
        return [p.name for p in self._scripts() if p.name not in recorded]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations in filename order. Returns the filenames applied."""
        scripts = self._scripts()
        conn = self._connect()
        applied: list[str] = []
        try:
            recorded = self._recorded(conn)
            for path in scripts:
                if path.name in recorded:
                    continue
                logger.info("Applying migration: %s", path.name)
                try:
                    conn.executescript(up_script(path))
                    conn.execute(
                        "INSERT INTO schema_migrations (filename) VALUES (?)", (path.name,)
                    )
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    raise StorageError(f"Migration {path.name} failed: {e}") from e
                applied.append(path.name)
        finally:
            conn.close()

        if not applied:
            logger.debug("Schema is up to date")
        return applied
