"""
Numeric formatting for prescriptions and money.

Optical powers (SPH/CYL/ADD) are written with an explicit sign and two
decimals: "+2.00", "-1.50", "+0.00". Axis is a bare integer in degrees.

Money is handled as Decimal end to end. to_decimal() is deliberately lenient
because values arrive from form fields and from stored documents written by
older clients (strings, floats, blanks).
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from core.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")

# Largest magnitudes accepted for amounts and quantities on a document
MAX_AMOUNT = Decimal("1000000000000")
MAX_QUANTITY = Decimal("1000000000")

# Placeholder shown for "no value" (distinct from a zero amount)
CURRENCY_PLACEHOLDER = "-"

# Leading numeric prefix, the same way a browser parseFloat() reads "1.5D" as 1.5
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> Optional[Decimal]:
    """
    Parse the leading number out of a free-text value.

    Args:
        value: str, int, float or Decimal

    Returns:
        Decimal, or None when no number can be read
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        value = str(value)
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return None
    try:
        number = Decimal(match.group(1))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def to_decimal(value: Any) -> Decimal:
    """Lenient conversion to Decimal; blanks and garbage become 0."""
    number = parse_number(value)
    return number if number is not None else ZERO


def quantize_money(value: Any) -> Decimal:
    """
    Round to 2 decimal places, half up.

    Raises:
        ValidationError: If the amount has too many digits to round
    """
    try:
        return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("amount is out of range", field="amount")


def bounded_decimal(value: Any, field: str, limit: Decimal = MAX_AMOUNT) -> Decimal:
    """
    Lenient conversion that rejects magnitudes at or above limit.

    Raises:
        ValidationError: naming field, when the value is out of range
    """
    number = to_decimal(value)
    if abs(number) >= limit:
        raise ValidationError(f"{field} is out of range", field=field)
    return number


def format_optical_value(raw: Any) -> str:
    """
    Canonicalize a SPH/CYL/ADD value.

    - "" and "-" are returned unchanged (the user is still typing)
    - unparseable text, and numbers too large to round, are returned unchanged
    - values that round to zero keep a minus only when actually negative
    - otherwise two decimals, with "+" for positive values and for zero
      unless the raw text carries an explicit minus

    Examples:
        "2"    -> "+2.00"
        "-1.5" -> "-1.50"
        "0"    -> "+0.00"
        "-0.001" -> "-0.00"
        "abc"  -> "abc"
    """
    if raw is None:
        return ""
    text = raw if isinstance(raw, str) else str(raw)
    if text == "" or text == "-":
        return text

    number = parse_number(text)
    if number is None:
        return text

    try:
        rounded = number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return text
    if rounded == 0:
        # "-0.001" keeps its sign like toFixed; a typed "-0" does not
        if number < 0:
            return "-0.00"
        return "0.00" if "-" in text else "+0.00"
    if rounded > 0:
        return f"+{rounded}"
    return str(rounded)


def format_axis(raw: Any) -> str:
    """Axis as an unsigned whole number of degrees ("90.0" -> "90")."""
    if raw is None:
        return ""
    text = raw if isinstance(raw, str) else str(raw)
    if text.strip() == "":
        return text
    number = parse_number(text)
    if number is None:
        return text
    return str(int(abs(number)))


def _group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Any, symbol: str = "₹") -> str:
    """
    Render an amount as "₹1,23,456.78".

    None renders as CURRENCY_PLACEHOLDER, never as a zero amount.
    """
    if amount is None:
        return CURRENCY_PLACEHOLDER
    value = quantize_money(amount)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    return f"{symbol}{sign}{_group_indian(whole)}.{fraction}"


def money_str(value: Any) -> str:
    """Stored representation of a money amount ("1058.00")."""
    return f"{quantize_money(value):.2f}"
