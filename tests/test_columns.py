"""Tests for column inference and pseudo-CSV rendering."""

from decimal import Decimal

from statement_ingest.config import ColumnRolePatterns
from statement_ingest.loaders.columns import (
    ColumnMapping,
    infer_columns,
    parse_amount_cell,
    render_row,
    render_rows,
    resolve_amount,
)


class TestInferColumns:
    """Tests for header -> role mapping."""

    def test_basic_headers(self):
        """Date/Description/Amount map to their roles."""
        mapping = infer_columns(["Date", "Description", "Amount"])

        assert mapping.date == "Date"
        assert mapping.description == "Description"
        assert mapping.amount == "Amount"
        assert mapping.type is None
        assert not mapping.has_debit_credit_pair

    def test_memo_header_is_description(self):
        mapping = infer_columns(["Posting Date", "Memo", "Value"])

        assert mapping.date == "Posting Date"
        assert mapping.description == "Memo"

    def test_positional_fallback(self):
        """Unrecognized headers fall back to columns 1/2/3."""
        mapping = infer_columns(["When", "What", "How Much", "Extra"])

        assert mapping.date == "When"
        assert mapping.description == "What"
        assert mapping.amount == "How Much"

    def test_positional_fallback_short_header(self):
        mapping = infer_columns(["Only"])

        assert mapping.date == "Only"
        assert mapping.description is None
        assert mapping.amount is None

    def test_debit_credit_pair_detected(self):
        mapping = infer_columns(["Date", "Memo", "Debit Amount", "Credit Amount"])

        assert mapping.debit == "Debit Amount"
        assert mapping.credit == "Credit Amount"
        assert mapping.has_debit_credit_pair

    def test_withdrawals_deposits_pair(self):
        mapping = infer_columns(["Date", "Details", "Withdrawals", "Deposits", "Balance"])

        assert mapping.debit == "Withdrawals"
        assert mapping.credit == "Deposits"

    def test_type_column(self):
        mapping = infer_columns(["Date", "Description", "Amount", "Transaction Type"])

        assert mapping.type == "Transaction Type"

    def test_first_pattern_wins_over_header_order(self):
        """Pattern order decides, not header order."""
        mapping = infer_columns(["Date", "Payee", "Description", "Amount"])

        # "desc" is tried before "payee"
        assert mapping.description == "Description"

    def test_custom_patterns(self):
        patterns = ColumnRolePatterns(date=["buchungstag"], description=["verwendungszweck"])
        mapping = infer_columns(["Buchungstag", "Verwendungszweck", "Betrag"], patterns)

        assert mapping.date == "Buchungstag"
        assert mapping.description == "Verwendungszweck"
        assert mapping.amount == "Betrag"


class TestParseAmountCell:
    """Tests for tabular amount parsing."""

    def test_plain(self):
        assert parse_amount_cell("4.50") == Decimal("4.50")

    def test_currency_and_thousands(self):
        assert parse_amount_cell("$1,234.56") == Decimal("1234.56")

    def test_negative(self):
        assert parse_amount_cell("-82.40") == Decimal("-82.40")

    def test_numeric_cell(self):
        assert parse_amount_cell(12) == Decimal("12")

    def test_empty_and_garbage(self):
        assert parse_amount_cell("") is None
        assert parse_amount_cell(None) is None
        assert parse_amount_cell("n/a") is None

    def test_non_finite_rejected(self):
        assert parse_amount_cell("NaN") is None
        assert parse_amount_cell("Infinity") is None


class TestResolveAmount:
    """Tests for signed amount synthesis."""

    def test_debit_amount_negated(self):
        """A positive debit becomes a negative amount."""
        mapping = infer_columns(["Date", "Memo", "Debit Amount", "Credit Amount"])
        row = {"Date": "2024-01-10", "Memo": "Coffee Shop", "Debit Amount": "4.50", "Credit Amount": ""}

        amount, type_label = resolve_amount(row, mapping)

        assert amount == Decimal("-4.50")
        assert type_label == "Debit"

    def test_credit_amount_passed_through(self):
        mapping = infer_columns(["Date", "Memo", "Debit Amount", "Credit Amount"])
        row = {"Date": "2024-01-11", "Memo": "Refund", "Debit Amount": "", "Credit Amount": "20.00"}

        amount, type_label = resolve_amount(row, mapping)

        assert amount == Decimal("20.00")
        assert type_label == "Credit"

    def test_pair_takes_precedence_over_amount_column(self):
        mapping = ColumnMapping(
            date="Date", description="Memo", amount="Amount", debit="Debit", credit="Credit"
        )
        row = {"Date": "2024-01-10", "Memo": "Coffee", "Amount": "999", "Debit": "4.50", "Credit": ""}

        amount, _ = resolve_amount(row, mapping)

        assert amount == Decimal("-4.50")

    def test_placeholder_opposite_cell_counts_as_zero(self):
        """A placeholder in the credit column does not discard the debit."""
        mapping = infer_columns(["Date", "Memo", "Debit Amount", "Credit Amount"])
        row = {"Date": "2024-01-10", "Memo": "Coffee Shop", "Debit Amount": "4.50", "Credit Amount": "-"}

        amount, type_label = resolve_amount(row, mapping)

        assert amount == Decimal("-4.50")
        assert type_label == "Debit"

    def test_unparseable_pair_cells(self):
        mapping = ColumnMapping(date="Date", description="Memo", debit="Debit", credit="Credit")

        amount, _ = resolve_amount(
            {"Date": "2024-01-10", "Memo": "Coffee", "Debit": "abc", "Credit": "N/A"}, mapping
        )
        assert amount is None

        amount, _ = resolve_amount(
            {"Date": "2024-01-10", "Memo": "Coffee", "Debit": "abc", "Credit": ""}, mapping
        )
        assert amount == Decimal("0")

    def test_type_keyword_corrects_sign(self):
        """A debit keyword makes a positive amount negative."""
        mapping = infer_columns(["Date", "Description", "Amount", "Type"])

        amount, _ = resolve_amount(
            {"Date": "2024-01-10", "Description": "Rent", "Amount": "1200", "Type": "Withdrawal"},
            mapping,
        )
        assert amount == Decimal("-1200")

        amount, _ = resolve_amount(
            {"Date": "2024-01-10", "Description": "Pay", "Amount": "-300", "Type": "Deposit"},
            mapping,
        )
        assert amount == Decimal("300")

    def test_unknown_type_keyword_leaves_sign(self):
        mapping = infer_columns(["Date", "Description", "Amount", "Type"])

        amount, type_label = resolve_amount(
            {"Date": "2024-01-10", "Description": "Misc", "Amount": "15", "Type": "POS"},
            mapping,
        )

        assert amount == Decimal("15")
        assert type_label == "POS"


class TestRenderRow:
    """Tests for pseudo-CSV rendering."""

    def test_render_debit_credit_row(self):
        mapping = infer_columns(["Date", "Memo", "Debit Amount", "Credit Amount"])
        row = {"Date": "2024-01-10", "Memo": "Coffee Shop", "Debit Amount": "4.50", "Credit Amount": ""}

        assert render_row(row, mapping) == "2024-01-10,Coffee Shop,-4.50,Debit"

    def test_commas_removed_from_fields(self):
        mapping = infer_columns(["Date", "Description", "Amount"])
        row = {"Date": "2024-01-10", "Description": "ACME, Inc.  payment", "Amount": "10"}

        assert render_row(row, mapping) == "2024-01-10,ACME Inc. payment,10,"

    def test_missing_fields_dropped(self):
        mapping = infer_columns(["Date", "Description", "Amount"])

        assert render_row({"Date": "", "Description": "X", "Amount": "1"}, mapping) is None
        assert render_row({"Date": "2024-01-10", "Description": "", "Amount": "1"}, mapping) is None
        assert render_row({"Date": "2024-01-10", "Description": "X", "Amount": "abc"}, mapping) is None

    def test_render_rows_keeps_valid_rows(self):
        mapping = infer_columns(["Date", "Description", "Amount"])
        rows = [
            {"Date": "2024-01-10", "Description": "Coffee", "Amount": "-3"},
            {"Date": "", "Description": "Broken", "Amount": "1"},
            {"Date": "2024-01-11", "Description": "Lunch", "Amount": "-12"},
        ]

        lines = render_rows(rows, mapping)

        assert lines == ["2024-01-10,Coffee,-3,", "2024-01-11,Lunch,-12,"]

    def test_tiny_amount_rendered_in_fixed_point(self):
        mapping = infer_columns(["Date", "Description", "Amount"])
        row = {"Date": "2024-01-10", "Description": "Interest", "Amount": "0.0000001"}

        assert render_row(row, mapping) == "2024-01-10,Interest,0.0000001,"
