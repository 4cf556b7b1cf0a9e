"""
Tax and discount calculator.

Pure functions turning line items plus a discount/tax configuration into
invoice totals. Every amount is a Decimal rounded to 2 places, and each
component is rounded BEFORE it is summed, so the identity

    total == subtotal - discount_amount + tax_amount + freight

holds exactly on the stored values.

Policies:
    - Lines whose total is zero, blank or negative are skipped everywhere.
    - Discounts are clamped at >= 0 but NOT at <= subtotal; a discount larger
      than the subtotal produces a negative taxable amount and is accepted.
    - Balance due has two call sites: display_balance_due() clamps at zero,
      stored_balance_due() does not. Saved documents use the unclamped value.
    - Tax amount is the undivided total; CGST/SGST halves are a reporting
      concern (see services.gst_report_service).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from modules.formatting import ZERO, quantize_money, to_decimal, money_str

HUNDRED = Decimal("100")


class DiscountType(str, Enum):
    """How a discount value is interpreted."""

    AMOUNT = "amount"
    PERCENTAGE = "percentage"

    @classmethod
    def parse(cls, value: Any) -> "DiscountType":
        """Anything that is not 'percentage' is a flat amount."""
        if isinstance(value, cls):
            return value
        return cls.PERCENTAGE if str(value or "").lower() == cls.PERCENTAGE.value else cls.AMOUNT


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived totals, computed once at save time and persisted."""

    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    freight: Decimal
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    """Unclamped total - amount_paid (the stored value)."""

    @property
    def display_balance_due(self) -> Decimal:
        """Balance shown to the user, never negative."""
        return display_balance_due(self.total, self.amount_paid)

    def to_dict(self) -> Dict[str, str]:
        return {
            "subtotal": money_str(self.subtotal),
            "discountAmount": money_str(self.discount_amount),
            "taxableAmount": money_str(self.taxable_amount),
            "taxRate": str(self.tax_rate),
            "taxAmount": money_str(self.tax_amount),
            "freightCharge": money_str(self.freight),
            "totalAmount": money_str(self.total),
            "amountPaid": money_str(self.amount_paid),
            "balanceDue": money_str(self.balance_due),
        }


@dataclass(frozen=True)
class QuantitySummary:
    """Quantities on an invoice split the way the bill footer shows them."""

    pairs: Decimal
    services: Decimal
    others: Decimal


def compute_line_total(
    price: Any,
    qty: Any,
    discount_type: Any = None,
    discount_value: Any = None,
) -> Decimal:
    """
    price x qty, less an optional item-level discount.

    Item discounts are used by the purchase flow only; sales lines pass
    no discount and get the plain product.
    """
    gross = to_decimal(price) * to_decimal(qty)
    value = to_decimal(discount_value)
    if value <= 0:
        return quantize_money(gross)
    if DiscountType.parse(discount_type) is DiscountType.PERCENTAGE:
        discount = gross * value / HUNDRED
    else:
        discount = value
    return quantize_money(gross - discount)


def is_filled(line: Any) -> bool:
    """A line takes part in calculations only when its total is positive."""
    return to_decimal(getattr(line, "total", None)) > 0


def filled_lines(lines: Iterable[Any]) -> List[Any]:
    return [line for line in lines if is_filled(line)]


def calculate_subtotal(lines: Iterable[Any]) -> Decimal:
    """Sum of line totals over filled lines."""
    subtotal = sum((to_decimal(line.total) for line in filled_lines(lines)), ZERO)
    return quantize_money(subtotal)


def calculate_discount_amount(subtotal: Any, discount_type: Any, discount_value: Any) -> Decimal:
    value = to_decimal(discount_value)
    if value <= 0:
        return quantize_money(ZERO)
    if DiscountType.parse(discount_type) is DiscountType.PERCENTAGE:
        return quantize_money(to_decimal(subtotal) * value / HUNDRED)
    return quantize_money(value)


def calculate_tax_amount(taxable_amount: Any, rate: Any) -> Decimal:
    return quantize_money(to_decimal(taxable_amount) * to_decimal(rate) / HUNDRED)


def display_balance_due(total: Any, amount_paid: Any) -> Decimal:
    """Balance for display: clamped at zero."""
    return max(ZERO, quantize_money(to_decimal(total) - to_decimal(amount_paid)))


def stored_balance_due(total: Any, amount_paid: Any) -> Decimal:
    """Balance written at save time: plain subtraction, may be negative."""
    return quantize_money(to_decimal(total) - to_decimal(amount_paid))


def compute_totals(
    lines: Iterable[Any],
    discount_type: Any = DiscountType.AMOUNT,
    discount_value: Any = 0,
    tax_rate: Any = 0,
    freight: Any = 0,
    amount_paid: Any = 0,
) -> InvoiceTotals:
    """
    Compute every derived invoice amount.

    Args:
        lines: Line items (anything with a .total attribute)
        discount_type: DiscountType or its string value
        discount_value: Percentage or flat amount
        tax_rate: Percentage rate of the selected tax option
        freight: Freight charge added after tax
        amount_paid: Amount received at save time

    Returns:
        InvoiceTotals with all amounts rounded to 2 places
    """
    subtotal = calculate_subtotal(lines)
    discount_amount = calculate_discount_amount(subtotal, discount_type, discount_value)
    taxable_amount = subtotal - discount_amount
    rate = to_decimal(tax_rate)
    tax_amount = calculate_tax_amount(taxable_amount, rate)
    freight_amount = quantize_money(freight)
    total = subtotal - discount_amount + tax_amount + freight_amount
    paid = quantize_money(amount_paid)

    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_rate=rate,
        tax_amount=tax_amount,
        freight=freight_amount,
        total=total,
        amount_paid=paid,
        balance_due=stored_balance_due(total, paid),
    )


def total_quantities(lines: Iterable[Any]) -> QuantitySummary:
    """Count pairs, services and everything else over filled lines."""
    pairs = services = others = ZERO
    for line in filled_lines(lines):
        qty = to_decimal(getattr(line, "qty", 0))
        unit = str(getattr(line, "unit", "") or "").lower()
        if unit == "service":
            services += qty
        elif unit == "pairs":
            pairs += qty
        else:
            others += qty
    return QuantitySummary(pairs=pairs, services=services, others=others)


def resolve_amount_paid(payment_status: Optional[str], amount_paid: Any, total: Any) -> Decimal:
    """
    Amount paid implied by the payment status.

    UNPAID means nothing was received. PAID with no amount entered means
    the full total, for every customer and not only walk-in "CASH CUSTOMER"
    sales. Anything else keeps the entered amount.
    """
    status = str(payment_status or "").upper()
    if status == "UNPAID":
        return quantize_money(ZERO)
    paid = quantize_money(amount_paid)
    if status == "PAID" and paid <= 0:
        return quantize_money(total)
    return paid
