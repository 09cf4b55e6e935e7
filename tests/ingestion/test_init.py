import io
import pytest
from decimal import Decimal

from errors import InputFormatError, ParseError
from ingestion import (
    FormatVariant,
    apply_bindings,
    decode_export,
    detect_format,
    get_available_formats,
    get_format_module,
    normalize_row,
    read_csv,
)
import ingestion.swisscard as swisscard
import ingestion.swisscards as swisscards
import ingestion.zak as zak
from models.binding import CategoryBinding
from models.transaction import TransactionRecord

SWISS_CARD_CSV = (
    "Data transazione;Descrizione;Importo;Debito/Credito;Categoria commerciante\n"
    "15.01.2025;COOP-1234 LUGANO;45,90;Addebito;Supermercati\n"
    "20.01.2025;PAGAMENTO;-500,00;Accredito;\n"
)

ZAK_CSV = (
    "Date;Description;Amount;Category\n"
    "04.03.25;Migros;12,40;Groceries\n"
    "\n"
    "05.03.25;Salary;-3'000,00;Income\n"
)

SWISSCARDS_CSV = (
    "Date;Description;Amount;Category\n"
    "2025-03-04;Shop;-1'234,56;Retail\n"
    "2025-03-05;Refund;20,00;Retail\n"
)


class TestRegistry:
    """Tests for get_format_module and get_available_formats."""

    def test_get_modules(self):
        assert get_format_module("swisscard") == swisscard
        assert get_format_module("zak") == zak
        assert get_format_module("swisscards") == swisscards

    def test_unknown_format_raises(self):
        with pytest.raises(ValueError, match="Unknown format: wise"):
            get_format_module("wise")

    def test_available_formats(self):
        assert set(get_available_formats()) == {"swisscard", "zak", "swisscards"}


class TestDetectFormat:
    """Tests for detect_format."""

    def test_swiss_card_by_column(self):
        header = ["Data transazione", "Descrizione", "Importo"]

        assert detect_format(header, {}) == FormatVariant.SWISS_CARD

    def test_swiss_card_wins_over_date_columns(self):
        header = ["Data transazione", "Date", "Amount"]

        assert detect_format(header, {"Date": "2025-01-01"}) == FormatVariant.SWISS_CARD

    def test_dotted_date_is_zak(self):
        header = ["Date", "Description", "Amount", "Category"]

        assert detect_format(header, {"Date": "04.03.25"}) == FormatVariant.ZAK

    def test_iso_date_is_swisscards(self):
        header = ["Date", "Description", "Amount", "Category"]

        assert detect_format(header, {"Date": "2025-03-04"}) == FormatVariant.SWISSCARDS

    def test_unknown_layout_names_missing_columns(self):
        with pytest.raises(InputFormatError, match="missing: Amount"):
            detect_format(["Date", "Text"], {"Date": "2025-03-04"})


class TestNormalizeRow:
    """Tests for normalize_row required-column checks."""

    def test_missing_required_column(self):
        with pytest.raises(InputFormatError, match="Missing column 'Importo'"):
            normalize_row({"Data transazione": "01.01.2025"}, FormatVariant.SWISS_CARD)

    def test_dispatches_to_variant(self):
        record = normalize_row({"Date": "04.03.25", "Amount": "1,00"}, FormatVariant.ZAK)

        assert record.date == "2025-03-04"


class TestReadCsv:
    """Tests for read_csv."""

    def test_swiss_card_file(self):
        records = read_csv(io.StringIO(SWISS_CARD_CSV))

        assert len(records) == 2
        assert records[0].date == "2025-01-15"
        assert records[0].amount == Decimal("45.90")
        assert records[0].merchant_category == "Supermercati"
        assert records[1].amount == Decimal("-500.00")
        assert records[1].merchant_category == ""

    def test_zak_file_skips_empty_lines(self):
        records = read_csv(io.StringIO(ZAK_CSV))

        assert [r.date for r in records] == ["2025-03-04", "2025-03-05"]
        assert records[1].amount == Decimal("-3000.00")

    def test_swisscards_file(self):
        records = read_csv(io.StringIO(SWISSCARDS_CSV))

        assert records[0].amount == Decimal("1234.56")
        assert records[1].amount == Decimal("-20.00")

    def test_header_with_bom_and_spaces(self):
        text = "\ufeffData transazione ; Importo\n01.02.2025;3,00\n"

        records = read_csv(io.StringIO(text))

        assert records[0].date == "2025-02-01"

    def test_forced_format(self):
        records = read_csv(io.StringIO(SWISSCARDS_CSV), format_name="swisscards")

        assert len(records) == 2

    def test_forced_unknown_format(self):
        with pytest.raises(InputFormatError, match="Unknown format"):
            read_csv(io.StringIO(SWISSCARDS_CSV), format_name="bogus")

    def test_empty_file(self):
        with pytest.raises(InputFormatError, match="Empty CSV file"):
            read_csv(io.StringIO(""))

    def test_header_only(self):
        with pytest.raises(InputFormatError, match="no transactions"):
            read_csv(io.StringIO("Date;Description;Amount;Category\n"))

    def test_unknown_layout(self):
        with pytest.raises(InputFormatError):
            read_csv(io.StringIO("Booking;Text;Value\n2025-01-01;x;1\n"))

    def test_bad_cell_aborts_whole_file(self):
        text = (
            "Date;Description;Amount;Category\n"
            "04.03.25;Migros;12,40;Groceries\n"
            "05.03.25;Coop;twelve;Groceries\n"
        )

        with pytest.raises(ParseError) as exc_info:
            read_csv(io.StringIO(text))

        assert exc_info.value.line == 3
        assert "Line 3" in exc_info.value.message

    def test_line_number_counts_blank_lines(self):
        text = (
            "Date;Description;Amount;Category\n"
            "\n"
            "04.03.25;Migros;12,40;Groceries\n"
            ";;;\n"
            "05.03.25;Coop;twelve;Groceries\n"
        )

        with pytest.raises(ParseError) as exc_info:
            read_csv(io.StringIO(text))

        assert exc_info.value.line == 5

    def test_short_row_is_format_error(self):
        text = "Date;Description;Amount\n04.03.25;Migros\n"

        with pytest.raises(InputFormatError, match="Missing column 'Amount'"):
            read_csv(io.StringIO(text))

    def test_mixed_date_layouts(self):
        text = (
            "Date;Description;Amount;Category\n"
            "2025-03-04;A;10,00;X\n"
            "04.03.25;B;-5,00;Y\n"
        )

        with pytest.raises(InputFormatError, match="Line 3: file mixes date layouts"):
            read_csv(io.StringIO(text))

    def test_mixed_date_layouts_dotted_first(self):
        text = (
            "Date;Description;Amount;Category\n"
            "04.03.25;B;-5,00;Y\n"
            "2025-03-04;A;10,00;X\n"
        )

        with pytest.raises(InputFormatError, match="zak format"):
            read_csv(io.StringIO(text))

    def test_forced_format_keeps_date_errors(self):
        text = (
            "Date;Description;Amount;Category\n"
            "2025-03-04;A;10,00;X\n"
            "04.03.25;B;-5,00;Y\n"
        )

        with pytest.raises(ParseError, match="Line 3: Invalid date"):
            read_csv(io.StringIO(text), format_name="swisscards")

    def test_cp1252_export(self):
        data = (
            "Data transazione;Descrizione;Importo;Debito/Credito;Categoria commerciante\n"
            "15.01.2025;Caffè Bar;4,50;Addebito;Ristoranti\n"
        ).encode("cp1252")

        records = read_csv(io.StringIO(decode_export(data), newline=""))

        assert records[0].description == "Caffè Bar"
        assert records[0].amount == Decimal("4.50")


class TestDecodeExport:
    """Tests for decode_export."""

    def test_utf8(self):
        assert decode_export("Caffè".encode("utf-8")) == "Caffè"

    def test_utf8_bom_is_dropped(self):
        assert decode_export(b"\xef\xbb\xbfDate") == "Date"

    def test_cp1252_fallback(self):
        assert decode_export("Caffè Società".encode("cp1252")) == "Caffè Società"

    def test_undecodable_bytes_are_replaced(self):
        # 0x81 is unassigned in cp1252 and invalid as a UTF-8 start byte
        assert decode_export(b"A\x81B") == "A\ufffdB"


class TestApplyBindings:
    """Tests for apply_bindings."""

    def _record(self, merchant_category):
        return TransactionRecord(
            date="2025-03-04",
            description="x",
            amount=Decimal("1"),
            merchant_category=merchant_category,
        )

    def test_match_fills_categories(self):
        bindings = [CategoryBinding("Groceries", 1, 10)]

        records = apply_bindings([self._record("Groceries")], bindings)

        assert records[0].macro_category == 1
        assert records[0].micro_category == 10
        assert records[0].is_categorized

    def test_match_is_case_sensitive(self):
        bindings = [CategoryBinding("groceries", 1, 10)]

        records = apply_bindings([self._record("Groceries")], bindings)

        assert records[0].macro_category is None
        assert records[0].micro_category is None
        assert not records[0].is_categorized

    def test_binding_without_micro_is_not_categorized(self):
        bindings = [CategoryBinding("Travel", 3)]

        records = apply_bindings([self._record("Travel")], bindings)

        assert records[0].macro_category == 3
        assert records[0].micro_category is None
        assert not records[0].is_categorized

    def test_no_bindings(self):
        records = apply_bindings([self._record("Anything")], [])

        assert not records[0].is_categorized
