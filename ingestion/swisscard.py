from typing import Mapping

from ingestion.parsing import parse_amount, parse_dotted_date
from models.transaction import TransactionRecord


DETECT_COLUMN = "Data transazione"
REQUIRED_COLUMNS = ["Data transazione", "Importo"]


def normalize_row(row: Mapping[str, str]) -> TransactionRecord:
    """Convert an Italian-language Swiss credit card statement row.

    Expected columns (semicolon separated):
    Data transazione;Descrizione;Importo;Debito/Credito;Categoria commerciante

    - Dates are DD.MM.YYYY.
    - Amounts use a decimal comma and are already signed: credits
      (payments, refunds) come in negative and are kept as income.
    - Debito/Credito is stored in metadata only. It never changes the sign.

    Raises:
        ParseError: If the date or amount cannot be parsed.
    """
    transaction_date = parse_dotted_date(row["Data transazione"])
    amount = parse_amount(row["Importo"])

    metadata = {}
    debit_credit = (row.get("Debito/Credito") or "").strip()
    if debit_credit:
        metadata["debit_credit"] = debit_credit

    return TransactionRecord(
        date=transaction_date,
        description=(row.get("Descrizione") or "").strip(),
        amount=amount,
        merchant_category=(row.get("Categoria commerciante") or "").strip(),
        metadata=metadata,
    )
