"""Import service: turns uploaded files into records and saves confirmed ones."""

import io
import sqlite3
from typing import List, Optional, TextIO

from pydantic import ValidationError as PydanticValidationError

import ingestion
from errors import PersistenceError, ValidationError
from logger import get_logger
from models.ledger import EXPENSES, INCOMES, Expense, ImportSummary, Income
from models.submission import SubmittedRecord
from models.transaction import TransactionRecord

logger = get_logger()


class ImportService:
    """Coordinates parsing, binding lookup, ID allocation and storage."""

    def __init__(self, db_manager, counters, expenses, incomes, bindings):
        """Initialize the import service.

        Args:
            db_manager: Database manager instance for database operations.
            counters: CounterService used to number new records.
            expenses: ExpenseService for the expense store.
            incomes: IncomeService for the income store.
            bindings: BindingService used to pre-fill categories.
        """
        self.db_manager = db_manager
        self.counters = counters
        self.expenses = expenses
        self.incomes = incomes
        self.bindings = bindings

    def parse_file(
        self, source: TextIO, format_name: Optional[str] = None
    ) -> List[TransactionRecord]:
        """Parse an export and pre-fill categories from the stored bindings.

        Raises:
            InputFormatError: If the file matches no known layout.
            ParseError: If any date or amount cell is invalid.
            PersistenceError: If the bindings cannot be read.
        """
        records = ingestion.read_csv(source, format_name)
        return ingestion.apply_bindings(records, self.bindings.find_all())

    def parse_export(
        self, data: bytes, format_name: Optional[str] = None
    ) -> List[TransactionRecord]:
        """Parse a raw export as uploaded or read from disk.

        Non-UTF-8 exports (cp1252 is common for Italian statements) are
        decoded leniently instead of being rejected.
        """
        text = ingestion.decode_export(data)
        return self.parse_file(io.StringIO(text, newline=""), format_name)

    def submit(self, items) -> ImportSummary:
        """Save confirmed records, routing them by the sign of their amount.

        Records with a negative amount are stored as incomes with the absolute
        amount; all others are stored as expenses. Both stores are written in
        a single transaction: either every record is saved or none is.

        Args:
            items: List of records in their JSON form.

        Returns:
            ImportSummary with the number of expenses and incomes saved.

        Raises:
            ValidationError: If items is not a non-empty list or an item is invalid.
            PersistenceError: If the records cannot be saved.
        """
        records = validate_submission(items)

        expenses = [r for r in records if not r.is_income]
        incomes = [r for r in records if r.is_income]

        try:
            with self.db_manager.connect() as conn:
                try:
                    self.db_manager.begin_immediate(conn)
                    expenses_count = self._store(conn, EXPENSES, expenses)
                    incomes_count = self._store(conn, INCOMES, incomes)
                    conn.commit()
                except sqlite3.Error:
                    conn.rollback()
                    raise
        except sqlite3.Error as e:
            logger.error(f"Error saving expenses: {e}")
            raise PersistenceError("Failed to save expenses")

        summary = ImportSummary(expenses_count=expenses_count, incomes_count=incomes_count)
        logger.info(summary.message)
        return summary

    def _store(self, conn, kind: str, records: List[SubmittedRecord]) -> int:
        if not records:
            return 0

        start_id = self.counters.allocate_in(conn, kind, len(records))
        if kind == EXPENSES:
            entries = [
                Expense(
                    id=start_id + index,
                    date=r.date,
                    description=r.description,
                    amount=r.amount,
                    micro_category_id=r.microCategory,
                )
                for index, r in enumerate(records)
            ]
            return self.expenses.bulk_create(conn, entries)

        entries = [
            Income(
                id=start_id + index,
                date=r.date,
                description=r.description,
                amount=abs(r.amount),
                micro_category_id=r.microCategory,
            )
            for index, r in enumerate(records)
        ]
        return self.incomes.bulk_create(conn, entries)


def validate_submission(items) -> List[SubmittedRecord]:
    """Check the payload shape before anything touches storage.

    Raises:
        ValidationError: If items is not a non-empty list or an item is invalid.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Invalid expenses data")

    records = []
    for index, item in enumerate(items):
        try:
            records.append(SubmittedRecord.model_validate(item))
        except PydanticValidationError as e:
            fields = ", ".join(
                ".".join(str(p) for p in err["loc"]) or "record" for err in e.errors()
            )
            raise ValidationError(f"Invalid expense at position {index}: {fields}")
    return records
