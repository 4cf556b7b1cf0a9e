"""
Unit tests for financial-year invoice numbering.
"""

from datetime import date

import pytest

from core.document_store import COUNTERS
from modules.invoice_numbering import (
    current_financial_year,
    generate_invoice_number,
    parse_invoice_number,
    preview_next_invoice_number,
)


class TestFinancialYear:
    """Test the April to March financial year."""

    @pytest.mark.parametrize("today, expected", [
        (date(2024, 4, 1), "2024-2025"),
        (date(2024, 12, 31), "2024-2025"),
        (date(2025, 3, 31), "2024-2025"),
        (date(2025, 4, 1), "2025-2026"),
    ])
    def test_boundaries(self, today, expected):
        assert current_financial_year(today) == expected


class TestCounter:
    """Test counter allocation."""

    def test_first_number_creates_counter(self, store):
        number = generate_invoice_number(store, "2024-2025")
        assert number.full_display == "2024-2025/01"
        assert store.get(COUNTERS, "invoices_2024-2025")["count"] == 1

    def test_sequence(self, store):
        numbers = [generate_invoice_number(store, "2024-2025").number for _ in range(3)]
        assert numbers == [1, 2, 3]

    def test_years_are_independent(self, store):
        generate_invoice_number(store, "2024-2025")
        assert generate_invoice_number(store, "2025-2026").full_display == "2025-2026/01"

    def test_preview_does_not_consume(self, store):
        assert preview_next_invoice_number(store, "2024-2025").number == 1
        assert preview_next_invoice_number(store, "2024-2025").number == 1
        generate_invoice_number(store, "2024-2025")
        assert preview_next_invoice_number(store, "2024-2025").full_display == "2024-2025/02"

    def test_padding_beyond_two_digits(self, store):
        store.set(COUNTERS, "invoices_2024-2025", {"count": 99})
        assert generate_invoice_number(store, "2024-2025").full_display == "2024-2025/100"


class TestParse:
    """Test parsing stored invoice numbers."""

    def test_financial_year_format(self):
        parsed = parse_invoice_number("2024-2025/61")
        assert parsed.prefix == "2024-2025"
        assert parsed.number == 61

    def test_legacy_format(self):
        parsed = parse_invoice_number("INV-0061")
        assert parsed.prefix == ""
        assert parsed.number == 61

    def test_bare_number(self):
        assert parse_invoice_number("7").padded_number == "07"

    def test_blank(self):
        assert parse_invoice_number("").number == 0
        assert parse_invoice_number(None).full_display == ""
