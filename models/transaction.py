from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass
class TransactionRecord:
    """A bank or card row normalized to the canonical shape.

    Records are transient: they live from file upload until the user
    confirms the categories and the batch is submitted.
    """

    date: str  # always YYYY-MM-DD
    description: str
    amount: Decimal  # positive = expense, negative = income
    merchant_category: str  # label as exported by the bank, "" if none
    macro_category: Optional[int] = None  # filled by binding lookup
    micro_category: Optional[int] = None
    metadata: dict = field(default_factory=dict)

    @property
    def is_income(self) -> bool:
        return self.amount < 0

    @property
    def is_categorized(self) -> bool:
        """True when both categories are set and the record can be saved."""
        return self.macro_category is not None and self.micro_category is not None

    def to_dict(self) -> dict:
        """Convert record to the JSON shape used by the API."""
        return {
            "date": self.date,
            "description": self.description,
            "amount": float(self.amount),
            "merchantCategory": self.merchant_category,
            "macroCategory": self.macro_category,
            "microCategory": self.micro_category,
        }
