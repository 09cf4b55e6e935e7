"""Bank export ingestion.

An uploaded file is classified once into one of the known format variants,
then every row is handed to that variant's ``normalize_row``.
"""

import csv
import logging
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, TextIO

import ingestion.swisscard as swisscard
import ingestion.swisscards as swisscards
import ingestion.zak as zak
from errors import ImporterError, InputFormatError, ParseError
from models.binding import CategoryBinding
from models.transaction import TransactionRecord

logger = logging.getLogger(__name__)

DELIMITER = ";"

# Tried in order; cp1252 decodes Italian accents in legacy exports
ENCODINGS = ("utf-8-sig", "cp1252")


class FormatVariant(Enum):
    SWISS_CARD = "swisscard"
    ZAK = "zak"
    SWISSCARDS = "swisscards"


_FORMAT_MODULES = {
    FormatVariant.SWISS_CARD: swisscard,
    FormatVariant.ZAK: zak,
    FormatVariant.SWISSCARDS: swisscards,
}


def get_format_module(format_name: str):
    """Get a format module by name."""
    try:
        return _FORMAT_MODULES[FormatVariant(format_name)]
    except ValueError:
        raise ValueError(f"Unknown format: {format_name}")


def get_available_formats() -> List[str]:
    """Get list of available format names."""
    return [variant.value for variant in FormatVariant]


def decode_export(data: bytes) -> str:
    """Decode raw export bytes, never rejecting a file for its encoding.

    UTF-8 (with or without BOM) is tried first, then cp1252. Bytes that
    neither encoding maps are replaced with U+FFFD.
    """
    for encoding in ENCODINGS:
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError:
            continue
        if encoding != ENCODINGS[0]:
            logger.info(f"Export is not UTF-8, decoded as {encoding}")
        return text
    logger.warning("Export matches no known encoding, replacing undecodable bytes")
    return data.decode(ENCODINGS[-1], errors="replace")


def detect_format(
    header: Sequence[str], first_row: Optional[Mapping[str, str]] = None
) -> FormatVariant:
    """Classify a file from its header and first data row.

    First match wins:
    1. a "Data transazione" column -> SWISS_CARD
    2. "Date" and "Amount" columns, and the first Date contains a dot -> ZAK
    3. "Date" and "Amount" columns otherwise -> SWISSCARDS

    Raises:
        InputFormatError: If the header matches none of the layouts.
    """
    columns = set(header)

    if swisscard.DETECT_COLUMN in columns:
        return FormatVariant.SWISS_CARD

    missing = [c for c in zak.REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise InputFormatError(
            f"Unrecognized CSV layout: expected a '{swisscard.DETECT_COLUMN}' "
            f"column or the columns {', '.join(zak.REQUIRED_COLUMNS)} "
            f"(missing: {', '.join(missing)})"
        )

    sample_date = (first_row or {}).get("Date") or ""
    if "." in sample_date:
        return FormatVariant.ZAK
    return FormatVariant.SWISSCARDS


def check_required_columns(row: Mapping[str, str], variant: FormatVariant) -> None:
    """Fail fast when a row lacks a column the variant needs.

    Raises:
        InputFormatError: Naming the first missing column.
    """
    for column in _FORMAT_MODULES[variant].REQUIRED_COLUMNS:
        if row.get(column) is None:
            raise InputFormatError(
                f"Missing column '{column}' for {variant.value} format"
            )


def normalize_row(row: Mapping[str, str], variant: FormatVariant) -> TransactionRecord:
    """Normalize a single row with the given variant."""
    check_required_columns(row, variant)
    return _FORMAT_MODULES[variant].normalize_row(row)


def read_csv(source: TextIO, format_name: Optional[str] = None) -> List[TransactionRecord]:
    """Parse a semicolon-delimited export into canonical records.

    The import is all-or-nothing: the first bad row aborts the whole file.

    Args:
        source: Text stream positioned at the header row.
        format_name: Force a format instead of detecting it.

    Returns:
        Records in file order.

    Raises:
        InputFormatError: Empty file, missing header, or unknown layout.
        ParseError: A date or amount cell could not be parsed.
    """
    reader = csv.DictReader(source, delimiter=DELIMITER)
    try:
        header = reader.fieldnames
    except csv.Error as e:
        raise InputFormatError(f"Not a valid CSV file: {e}")
    if not header:
        raise InputFormatError("Empty CSV file")
    reader.fieldnames = _clean_header(header)

    try:
        rows = [(reader.line_num, row) for row in reader if _has_content(row)]
    except csv.Error as e:
        raise InputFormatError(f"Not a valid CSV file: {e}")
    if not rows:
        raise InputFormatError("CSV file has a header but no transactions")

    if format_name:
        try:
            variant = FormatVariant(format_name)
        except ValueError:
            raise InputFormatError(f"Unknown format: {format_name}")
    else:
        variant = detect_format(reader.fieldnames, rows[0][1])
    logger.info(f"Detected {variant.value} format")

    # Zak and Swisscards share a header; the first Date decides for the whole file
    check_layout = not format_name and variant != FormatVariant.SWISS_CARD

    records = []
    for line_num, row in rows:
        if check_layout:
            _check_date_layout(row, variant, line_num)
        try:
            records.append(normalize_row(row, variant))
        except ParseError as e:
            raise ParseError(e.message, line=line_num)
        except ImporterError:
            raise
        except (KeyError, AttributeError) as e:
            raise InputFormatError(f"Line {line_num}: malformed row ({e})")

    logger.info(f"Successfully parsed {len(records)} transactions")
    return records


def apply_bindings(
    records: Iterable[TransactionRecord], bindings: Iterable[CategoryBinding]
) -> List[TransactionRecord]:
    """Pre-fill categories from remembered merchant category bindings.

    Matching is exact and case-sensitive. Records without a binding keep
    both categories empty and must be categorized by hand before saving.
    """
    lookup: Dict[str, CategoryBinding] = {b.merchant_category: b for b in bindings}

    records = list(records)
    for record in records:
        binding = lookup.get(record.merchant_category)
        if binding:
            record.macro_category = binding.macro_category
            record.micro_category = binding.micro_category
        else:
            record.macro_category = None
            record.micro_category = None

    bound = sum(1 for r in records if r.is_categorized)
    logger.debug(f"Bindings matched {bound}/{len(records)} records")
    return records


def _clean_header(header: Sequence[str]) -> List[str]:
    cleaned = [(h or "").strip() for h in header]
    if cleaned:
        cleaned[0] = cleaned[0].lstrip("\ufeff")
    return cleaned


def _has_content(row: Mapping[str, str]) -> bool:
    return any((v or "").strip() for k, v in row.items() if k is not None)


def _check_date_layout(row: Mapping[str, str], variant: FormatVariant, line_num: int) -> None:
    # Missing or blank dates are reported by the variant parser
    if not (row.get("Date") or "").strip():
        return
    if detect_format(list(row.keys()), row) != variant:
        raise InputFormatError(
            f"Line {line_num}: file mixes date layouts; the first row was read as "
            f"{variant.value} format but this row's Date is {row['Date'].strip()!r}"
        )
