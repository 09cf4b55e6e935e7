from typing import Mapping

from ingestion.parsing import parse_amount, parse_dotted_date
from models.transaction import TransactionRecord


REQUIRED_COLUMNS = ["Date", "Amount"]


def normalize_row(row: Mapping[str, str]) -> TransactionRecord:
    """Convert a Zak bank export row.

    Expected columns (semicolon separated): Date;Description;Amount;Category

    - Dates are DD.MM.YY, always in the 2000s.
    - Source amounts are negative for money coming in, so a negative value
      becomes income (negative) and a positive one an expense.

    Raises:
        ParseError: If the date or amount cannot be parsed.
    """
    transaction_date = parse_dotted_date(row["Date"], short_year=True)

    source_amount = parse_amount(row["Amount"])
    amount = abs(source_amount)
    if source_amount < 0:
        amount = -amount

    return TransactionRecord(
        date=transaction_date,
        description=(row.get("Description") or "").strip(),
        amount=amount,
        merchant_category=(row.get("Category") or "").strip(),
    )
