from typing import Mapping

from ingestion.parsing import parse_amount, parse_iso_date
from models.transaction import TransactionRecord


REQUIRED_COLUMNS = ["Date", "Amount"]


def normalize_row(row: Mapping[str, str]) -> TransactionRecord:
    """Convert a Swisscards (or Wise transfer) export row.

    Expected columns (semicolon separated): Date;Description;Amount;Category

    - Dates are already YYYY-MM-DD and are kept as they are.
    - Source amounts are positive for money coming in: a positive value
      becomes income (negative), a negative value an expense. This is the
      opposite of the Zak convention.

    Raises:
        ParseError: If the date or amount cannot be parsed.
    """
    transaction_date = parse_iso_date(row["Date"])

    source_amount = parse_amount(row["Amount"])
    amount = abs(source_amount)
    if source_amount > 0:
        amount = -amount

    return TransactionRecord(
        date=transaction_date,
        description=(row.get("Description") or "").strip(),
        amount=amount,
        merchant_category=(row.get("Category") or "").strip(),
    )
