"""SQLite connections, write transactions and schema migrations."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import List, Set

from config import Config, get_migrations_dir
from logger import get_logger

logger = get_logger()

_MIGRATIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        migration_file TEXT PRIMARY KEY,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


class DatabaseManager:
    """Opens connections to the ledger database and keeps its schema current.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        # Concurrent imports wait on the write lock instead of failing at once
        conn = sqlite3.connect(db_path, timeout=10)
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def begin_immediate(conn):
        """Start a write transaction, taking the write lock up front.

        Two writers that both start with a read could otherwise each hold a
        shared lock and fail with "database is locked" when upgrading.
        """
        if not conn.in_transaction:
            conn.execute("BEGIN IMMEDIATE")

    def get_db_path(self) -> Path:
        return self.config.db_path

    def get_migrations_dir(self) -> Path:
        return get_migrations_dir()

    def available_migrations(self) -> List[str]:
        """Names of the bundled .sql migration files, in apply order."""
        migrations_dir = self.get_migrations_dir()
        if not migrations_dir.exists():
            return []
        return sorted(path.name for path in migrations_dir.glob("*.sql"))

    def migrate(self) -> List[str]:
        """Apply every migration not yet recorded in schema_migrations.

        A failing file stops the run and is not recorded, so the next run
        retries it.

        Returns:
            Names of the migrations applied by this call.
        """
        with self.connect() as conn:
            applied = applied_migrations(conn)
            pending = [m for m in self.available_migrations() if m not in applied]
            for name in pending:
                apply_migration(conn, self.get_migrations_dir() / name)
        return pending


def applied_migrations(conn: sqlite3.Connection) -> Set[str]:
    """Names recorded in schema_migrations; creates the table on first use."""
    conn.execute(_MIGRATIONS_TABLE)
    conn.commit()
    rows = conn.execute("SELECT migration_file FROM schema_migrations").fetchall()
    return {row[0] for row in rows}


def apply_migration(conn: sqlite3.Connection, migration_path: Path) -> None:
    """Run one migration script and record it.

    Raises:
        sqlite3.Error: If the script fails; nothing is recorded.
    """
    try:
        conn.executescript(migration_path.read_text())
        conn.execute(
            "INSERT INTO schema_migrations (migration_file) VALUES (?)",
            (migration_path.name,),
        )
        conn.commit()
        logger.info(f"Applied migration: {migration_path.name}")
    except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"Error applying migration {migration_path.name}: {e}")
        raise
