"""Expense and income services for the two ledger tables."""

import sqlite3
from decimal import Decimal
from typing import List, Optional, Type

from errors import PersistenceError
from models.ledger import EXPENSES, INCOMES, Expense, Income, LedgerEntry

_SELECT_FIELDS = "id, date, description, amount, micro_category_id, recurrent"


class _LedgerService:
    """Shared queries for a table of numbered ledger entries."""

    table: str
    kind: str
    model: Type[LedgerEntry]

    def __init__(self, db_manager):
        """Initialize the service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def bulk_create(self, conn: sqlite3.Connection, entries: List[LedgerEntry]) -> int:
        """Insert entries inside the caller's transaction.

        The caller assigns IDs (see CounterService) and commits.

        Returns:
            Number of rows inserted.

        Raises:
            sqlite3.Error: Left to the caller, who owns the transaction.
        """
        if not entries:
            return 0

        conn.executemany(
            f"INSERT INTO {self.table} ({_SELECT_FIELDS}) VALUES (?, ?, ?, ?, ?, ?)",
            [
                (
                    e.id,
                    e.date,
                    e.description,
                    float(e.amount),
                    e.micro_category_id,
                    e.recurrent,
                )
                for e in entries
            ],
        )
        return len(entries)

    def find_all(self) -> List[LedgerEntry]:
        """Get all entries ordered by id."""
        try:
            with self.db_manager.connect() as conn:
                rows = conn.execute(
                    f"SELECT {_SELECT_FIELDS} FROM {self.table} ORDER BY id"
                ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {self.kind}: {e}")
        return [self._row_to_entry(row) for row in rows]

    def find(self, entry_id: int) -> Optional[LedgerEntry]:
        """Get a single entry by ID, or None."""
        try:
            with self.db_manager.connect() as conn:
                row = conn.execute(
                    f"SELECT {_SELECT_FIELDS} FROM {self.table} WHERE id = ?",
                    (entry_id,),
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {self.kind}: {e}")
        return self._row_to_entry(row) if row else None

    def count(self) -> int:
        try:
            with self.db_manager.connect() as conn:
                return conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {self.kind}: {e}")

    def _row_to_entry(self, row: tuple) -> LedgerEntry:
        return self.model(
            id=row[0],
            date=row[1],
            description=row[2],
            amount=Decimal(str(row[3])),
            micro_category_id=row[4],
            recurrent=row[5],
        )


class ExpenseService(_LedgerService):
    """Service for stored expenses."""

    table = "expenses"
    kind = EXPENSES
    model = Expense


class IncomeService(_LedgerService):
    """Service for stored incomes."""

    table = "incomes"
    kind = INCOMES
    model = Income
