"""Cell parsers shared by the format modules.

All parsers raise ParseError on bad input; callers attach the line number.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from errors import ParseError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_amount(text: str) -> Decimal:
    """Parse a decimal-comma amount such as ``"1'234,56"`` or ``"-50,00"``.

    Apostrophe group separators are dropped and the decimal comma becomes a
    decimal point before parsing.

    Raises:
        ParseError: If the value is empty or not a number.
    """
    cleaned = (text or "").strip().replace("'", "").replace(",", ".")
    if not cleaned:
        raise ParseError("Missing amount")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ParseError(f"Invalid amount: {text!r}")
    if not value.is_finite():
        raise ParseError(f"Invalid amount: {text!r}")
    return value


def parse_dotted_date(text: str, short_year: bool = False) -> str:
    """Convert ``DD.MM.YYYY`` (or ``DD.MM.YY``) to ``YYYY-MM-DD``.

    Day and month may come without zero padding. With ``short_year`` every
    two-digit year is taken to be in the 2000s.

    Raises:
        ParseError: If the value does not have three numeric parts or is not
            a real calendar date.
    """
    parts = (text or "").strip().split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ParseError(f"Invalid date: {text!r}")

    day, month, year = parts
    if short_year:
        if len(year) != 2:
            raise ParseError(f"Expected a two-digit year: {text!r}")
        year = f"20{year}"
    elif len(year) != 4:
        raise ParseError(f"Expected a four-digit year: {text!r}")

    return _validated(f"{year}-{month.zfill(2)}-{day.zfill(2)}", text)


def parse_iso_date(text: str) -> str:
    """Validate a ``YYYY-MM-DD`` date and return it unchanged.

    Raises:
        ParseError: If the value is not an ISO calendar date.
    """
    cleaned = (text or "").strip()
    if not _ISO_DATE.match(cleaned):
        raise ParseError(f"Invalid date: {text!r}")
    return _validated(cleaned, text)


def _validated(iso: str, original: str) -> str:
    try:
        date.fromisoformat(iso)
    except ValueError:
        raise ParseError(f"Invalid date: {original!r}")
    return iso
