"""
Unit tests for the tax and discount calculator.
"""

from decimal import Decimal

import pytest

from models.line_item import LineItem
from modules.calculator import (
    DiscountType,
    calculate_discount_amount,
    calculate_subtotal,
    compute_line_total,
    compute_totals,
    display_balance_due,
    resolve_amount_paid,
    stored_balance_due,
    total_quantities,
)


def line(price, qty=1, **kwargs):
    return LineItem(item_name="Item", price=Decimal(str(price)), qty=qty, **kwargs)


class TestLineTotals:
    """Test line total derivation."""

    def test_price_times_qty(self):
        assert compute_line_total("500", 2) == Decimal("1000.00")

    def test_item_discount_amount(self):
        assert compute_line_total(100, 3, "amount", 50) == Decimal("250.00")

    def test_item_discount_percentage(self):
        assert compute_line_total(200, 2, "percentage", 10) == Decimal("360.00")

    def test_line_item_derives_total(self):
        assert line(199.5, 2).total == Decimal("399.00")


class TestSubtotal:
    """Test subtotal over filled lines."""

    def test_zero_line_is_excluded(self):
        """A zero-total row contributes nothing (and nothing undefined)."""
        lines = [line(0, 1), line(200, 1)]
        assert calculate_subtotal(lines) == Decimal("200.00")

    def test_order_independent(self):
        lines = [line(10.1), line(20.2, 3), line(5.55, 2)]
        assert calculate_subtotal(lines) == calculate_subtotal(list(reversed(lines)))

    def test_empty(self):
        assert calculate_subtotal([]) == Decimal("0.00")


class TestDiscount:
    """Test invoice-level discount."""

    def test_percentage(self):
        assert calculate_discount_amount(Decimal("1000"), DiscountType.PERCENTAGE, 10) == Decimal("100.00")

    def test_amount(self):
        assert calculate_discount_amount(Decimal("1000"), "amount", "75.5") == Decimal("75.50")

    def test_negative_clamped_to_zero(self):
        assert calculate_discount_amount(Decimal("1000"), "amount", -20) == Decimal("0.00")

    def test_unknown_type_is_amount(self):
        assert DiscountType.parse("flat") is DiscountType.AMOUNT
        assert DiscountType.parse("PERCENTAGE") is DiscountType.PERCENTAGE


class TestComputeTotals:
    """Test the full totals computation."""

    def test_end_to_end_scenario(self):
        """500 x 2, 10% off, CGST/SGST 12%, freight 50 -> 1058.00."""
        totals = compute_totals(
            [line(500, 2)],
            discount_type="percentage",
            discount_value=10,
            tax_rate=12,
            freight=50,
        )

        assert totals.subtotal == Decimal("1000.00")
        assert totals.discount_amount == Decimal("100.00")
        assert totals.taxable_amount == Decimal("900.00")
        assert totals.tax_amount == Decimal("108.00")
        assert totals.total == Decimal("1058.00")
        assert totals.balance_due == Decimal("1058.00")

    def test_total_identity(self):
        totals = compute_totals(
            [line("333.33", 3), line("12.34", 7)],
            discount_type="percentage",
            discount_value="7.5",
            tax_rate=18,
            freight="40.05",
        )
        assert totals.total == (
            totals.subtotal - totals.discount_amount + totals.tax_amount + totals.freight
        )

    def test_zero_percent_discount(self):
        totals = compute_totals([line(250, 4)], discount_type="percentage", discount_value=0)
        assert totals.discount_amount == Decimal("0.00")
        assert totals.total == totals.subtotal

    def test_discount_larger_than_subtotal_allowed(self):
        totals = compute_totals([line(100)], discount_type="amount", discount_value=150, tax_rate=12)
        assert totals.taxable_amount == Decimal("-50.00")
        assert totals.total == Decimal("-56.00")

    def test_to_dict_uses_stored_field_names(self):
        data = compute_totals([line(500, 2)], tax_rate=6).to_dict()
        assert data["totalAmount"] == "1060.00"
        assert data["taxAmount"] == "60.00"
        assert data["freightCharge"] == "0.00"


class TestBalanceDue:
    """Test the two balance call sites."""

    def test_overpayment(self):
        assert stored_balance_due(100, 150) == Decimal("-50.00")
        assert display_balance_due(100, 150) == Decimal("0")

    def test_partial_payment(self):
        assert stored_balance_due("1058", "500") == Decimal("558.00")
        assert display_balance_due("1058", "500") == Decimal("558.00")

    def test_display_property(self):
        totals = compute_totals([line(100)], amount_paid=120)
        assert totals.balance_due == Decimal("-20.00")
        assert totals.display_balance_due == Decimal("0")


class TestPaymentStatus:
    """Test amount paid implied by the payment status."""

    @pytest.mark.parametrize("status, entered, expected", [
        ("UNPAID", "300", "0.00"),
        ("PAID", "0", "1058.00"),
        ("PAID", "1058", "1058.00"),
        ("PARTIAL", "300", "300.00"),
    ])
    def test_resolve_amount_paid(self, status, entered, expected):
        assert resolve_amount_paid(status, entered, Decimal("1058.00")) == Decimal(expected)


class TestQuantities:
    """Test the pairs/services/others rollup."""

    def test_split_by_unit(self):
        lines = [
            line(1500, 2, unit="Pairs"),
            line(200, 1, unit="Service"),
            line(50, 3, unit="Pieces"),
            line(0, 9, unit="Pairs"),
        ]
        summary = total_quantities(lines)
        assert summary.pairs == Decimal("2")
        assert summary.services == Decimal("1")
        assert summary.others == Decimal("3")
