import sqlite3
from pathlib import Path

from src.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS_DIR = str(Path(__file__).resolve().parent.parent.parent / "migrations")


def table_names(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    finally:
        conn.close()
    return {r[0] for r in rows}


def test_migrations_create_schema(tmp_path):
    db_path = str(tmp_path / "analytics.db")
    applied = SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["0001_initial.sql"]
    assert {"websites", "events", "_migrations"} <= table_names(db_path)


def test_migrations_are_idempotent(tmp_path):
    db_path = str(tmp_path / "analytics.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()

    assert SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations() == []


def test_down_section_not_applied(tmp_path):
    db_path = str(tmp_path / "analytics.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()

    # The Down part drops the tables; they must still exist
    assert "events" in table_names(db_path)
