import sqlite3
from pathlib import Path

import pytest

from inkwell.adapters.sqlite.migrator import SQLiteMigrator
from inkwell.domain.errors import StorageError

MIGRATIONS_DIR = str(Path(__file__).resolve().parents[2] / "migrations")


def _tables(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    finally:
        conn.close()
    return {r[0] for r in rows}


def test_migrations_create_schema(tmp_path):
    db_path = str(tmp_path / "fresh.db")
    applied = SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["0001_initial.sql"]
    assert {
        "users",
        "categories",
        "articles",
        "subscribers",
        "contact_messages",
        "site_stats",
        "schema_migrations",
    } <= _tables(db_path)


def test_migrations_are_idempotent(tmp_path):
    db_path = str(tmp_path / "twice.db")
    migrator = SQLiteMigrator(db_path, MIGRATIONS_DIR)
    migrator.run_migrations()

    assert migrator.run_migrations() == []


def test_down_section_is_not_applied(tmp_path):
    db_path = str(tmp_path / "down.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()

    # The rollback part of the script drops every table; they must still exist.
    assert "site_stats" in _tables(db_path)


def test_site_stats_has_one_row_per_day(tmp_path):
    db_path = str(tmp_path / "pk.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()

    conn = sqlite3.connect(db_path)
    try:
        conn.execute("INSERT INTO site_stats (date) VALUES ('2024-01-01')")
        try:
            conn.execute("INSERT INTO site_stats (date) VALUES ('2024-01-01')")
        except sqlite3.IntegrityError:
            duplicate_rejected = True
        else:
            duplicate_rejected = False
    finally:
        conn.close()

    assert duplicate_rejected


def test_pending_lists_unapplied_files(tmp_path):
    scripts = tmp_path / "migrations"
    scripts.mkdir()
    (scripts / "0001_a.sql").write_text("CREATE TABLE a (id INTEGER);\n-- Down\nDROP TABLE a;\n")
    (scripts / "0002_b.sql").write_text("CREATE TABLE b (id INTEGER);\n")
    migrator = SQLiteMigrator(str(tmp_path / "p.db"), scripts)

    assert migrator.pending() == ["0001_a.sql", "0002_b.sql"]
    migrator.run_migrations()
    assert migrator.pending() == []


def test_broken_script_raises_storage_error(tmp_path):
    scripts = tmp_path / "migrations"
    scripts.mkdir()
    (scripts / "0001_bad.sql").write_text("CREATE TABLE oops (;\n")
    migrator = SQLiteMigrator(str(tmp_path / "bad.db"), scripts)

    with pytest.raises(StorageError, match="0001_bad.sql"):
        migrator.run_migrations()
    assert migrator.pending() == ["0001_bad.sql"]


def test_missing_directory_raises_storage_error(tmp_path):
    with pytest.raises(StorageError):
        SQLiteMigrator(str(tmp_path / "x.db"), tmp_path / "absent").run_migrations()
