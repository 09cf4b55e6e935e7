"""Stored expense and income records plus the counter that numbers them."""

from dataclasses import dataclass
from decimal import Decimal

EXPENSES = "Expenses"
INCOMES = "Incomes"
COUNTER_KINDS = (EXPENSES, INCOMES)


@dataclass
class LedgerEntry:
    id: int
    date: str  # YYYY-MM-DD
    description: str
    amount: Decimal  # always non-negative once stored
    micro_category_id: int
    recurrent: int = 0

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "Date": self.date,
            "Description": self.description,
            "Amount": float(self.amount),
            "MicroCategory": self.micro_category_id,
            "Recurrent": self.recurrent,
        }


@dataclass
class Expense(LedgerEntry):
    pass


@dataclass
class Income(LedgerEntry):
    pass


@dataclass
class Counter:
    """Monotonic ID register for one record kind ("Expenses" or "Incomes")."""

    kind: str
    seq: int


@dataclass
class ImportSummary:
    """Outcome of a submitted batch."""

    expenses_count: int
    incomes_count: int

    @property
    def message(self) -> str:
        if self.expenses_count > 0 and self.incomes_count > 0:
            return (
                f"Successfully imported {self.expenses_count} expenses "
                f"and {self.incomes_count} incomes"
            )
        if self.expenses_count > 0:
            return f"Successfully imported {self.expenses_count} expenses"
        if self.incomes_count > 0:
            return f"Successfully imported {self.incomes_count} incomes"
        return "No records were imported"

    def to_dict(self) -> dict:
        return {
            "success": True,
            "expensesCount": self.expenses_count,
            "incomesCount": self.incomes_count,
            "message": self.message,
        }
