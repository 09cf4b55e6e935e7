"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from db.manager import applied_migrations, apply_migration


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Bring an existing connection (usually in-memory) up to the current schema.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    applied = applied_migrations(conn)
    for migration_path in sorted(migrations_dir.glob("*.sql")):
        if migration_path.name not in applied:
            apply_migration(conn, migration_path)


def submission_item(amount, micro=10, **overrides) -> dict:
    """A confirmed record as the import UI posts it to /api/expenses."""
    item = {
        "date": "2025-03-04",
        "description": "Migros",
        "amount": amount,
        "macroCategory": 1,
        "microCategory": micro,
    }
    item.update(overrides)
    return item
