"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from pathlib import Path

from config import Config, get_migrations_dir
from services.base import Services
from tests.helpers import run_migrations


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "easybudget",
        db_data_dir=tmp_path / "easybudget" / "db",
        db_filename="test.db",
        bindings_filename="category-bindings.json",
        log_level="DEBUG",
        log_dir=tmp_path / "easybudget" / "logs",
    )


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a DatabaseManager with schema already set up.

    This fixture provides a DatabaseManager that uses an in-memory database
    with all migrations already applied.

    Args:
        test_db: In-memory database connection fixture.

    Returns:
        DatabaseManager: Database manager with schema ready.
    """
    run_migrations(test_db, get_migrations_dir())

    class TestDatabaseManager:
        """Test database manager that uses in-memory connection."""

        def __init__(self, conn):
            self.conn = conn

        def connect(self):
            """Return a context manager for the test connection."""
            return _TestConnectionContext(self.conn)

        @staticmethod
        def begin_immediate(conn):
            if not conn.in_transaction:
                conn.execute("BEGIN IMMEDIATE")

        def get_db_path(self):
            """Return a fake path for the test database."""
            return Path(":memory:")

        def get_migrations_dir(self):
            """Get the migrations directory path."""
            return get_migrations_dir()

    class _TestConnectionContext:
        """Context manager for test database connections."""

        def __init__(self, conn):
            self.conn = conn

        def __enter__(self):
            return self.conn

        def __exit__(self, exc_type, exc_val, exc_tb):
            # Don't close the connection - let the fixture handle it
            pass

    return TestDatabaseManager(test_db)


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with test database.

    Args:
        test_config: Test configuration fixture.
        db_manager_with_schema: Database manager with schema set up.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema)


@pytest.fixture
def seeded_services(services):
    """Services with a small category taxonomy loaded."""
    services.categories.seed(
        """
        - id: 1
          name: Food
          micro:
            - id: 10
              name: Groceries
            - id: 11
              name: Restaurants
        - id: 2
          name: Salary
          micro:
            - id: 20
              name: Wage
        """
    )
    return services


@pytest.fixture
def app(seeded_services):
    """Flask app wired to the test services."""
    from web import create_app

    app = create_app(seeded_services.config, services=seeded_services)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
