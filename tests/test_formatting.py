"""
Unit tests for prescription and money formatting.
"""

from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from modules.formatting import (
    bounded_decimal,
    format_axis,
    format_currency,
    format_optical_value,
    money_str,
    parse_number,
    quantize_money,
    to_decimal,
)


class TestFormatOpticalValue:
    """Test SPH/CYL/ADD canonicalization."""

    @pytest.mark.parametrize("raw, expected", [
        ("2", "+2.00"),
        ("-1.5", "-1.50"),
        ("0", "+0.00"),
        ("+0.75", "+0.75"),
        ("-0.25", "-0.25"),
        ("3.125", "+3.13"),
        (1.5, "+1.50"),
    ])
    def test_numeric_values(self, raw, expected):
        assert format_optical_value(raw) == expected

    @pytest.mark.parametrize("raw", ["", "-", "abc", "plano"])
    def test_unparseable_values_unchanged(self, raw):
        """Blank, a lone minus and free text are left as typed."""
        assert format_optical_value(raw) == raw

    def test_none_is_blank(self):
        assert format_optical_value(None) == ""

    def test_negative_zero(self):
        assert format_optical_value("-0") == "0.00"

    def test_small_negative_keeps_sign(self):
        assert format_optical_value("-0.001") == "-0.00"
        assert format_optical_value("0.001") == "+0.00"

    @pytest.mark.parametrize("raw", ["1e30", "-99999999999999999999999999999"])
    def test_too_large_to_round_unchanged(self, raw):
        assert format_optical_value(raw) == raw

    def test_idempotent(self):
        for raw in ("2", "-1.5", "0", "+4.25"):
            once = format_optical_value(raw)
            assert format_optical_value(once) == once


class TestFormatAxis:
    """Test axis formatting."""

    def test_whole_degrees(self):
        assert format_axis("90.0") == "90"
        assert format_axis("180") == "180"

    def test_blank_and_text(self):
        assert format_axis("") == ""
        assert format_axis(None) == ""
        assert format_axis("x") == "x"


class TestMoney:
    """Test money parsing, rounding and display."""

    def test_parse_number_leading_prefix(self):
        assert parse_number("1.5D") == Decimal("1.5")
        assert parse_number("abc") is None
        assert parse_number(None) is None

    def test_to_decimal_defaults_to_zero(self):
        assert to_decimal("") == Decimal("0")
        assert to_decimal("garbage") == Decimal("0")
        assert to_decimal("12.50") == Decimal("12.50")

    def test_quantize_half_up(self):
        assert quantize_money("2.345") == Decimal("2.35")
        assert quantize_money("2.344") == Decimal("2.34")

    def test_quantize_too_large_raises_validation_error(self):
        with pytest.raises(ValidationError):
            quantize_money("1e30")

    def test_bounded_decimal(self):
        assert bounded_decimal("250.5", "price") == Decimal("250.5")
        assert bounded_decimal("", "price") == Decimal("0")
        with pytest.raises(ValidationError) as exc_info:
            bounded_decimal("1e30", "price")
        assert exc_info.value.field == "price"
        with pytest.raises(ValidationError):
            bounded_decimal("-1e13", "freightCharge")

    def test_money_str(self):
        assert money_str(1058) == "1058.00"
        assert money_str("59.999") == "60.00"

    def test_format_currency_indian_grouping(self):
        assert format_currency(Decimal("1234567.8")) == "₹12,34,567.80"
        assert format_currency(500) == "₹500.00"
        assert format_currency(-1500) == "₹-1,500.00"

    def test_format_currency_none_is_placeholder(self):
        assert format_currency(None) == "-"
        assert format_currency(0) == "₹0.00"
