"""
Request payload parsing shared by the sales and purchase routes.

Free text is passed through bleach before it reaches a service, and every
parse error surfaces as a ValidationError so the app returns a 400.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import bleach

from core.exceptions import ValidationError
from models.invoice import DiscountConfig, PartySnapshot, PaymentInfo
from models.line_item import LineItem
from modules.formatting import bounded_decimal

# Constants
MAX_NAME_LENGTH = 200
MAX_NOTES_LENGTH = 1000

_PARTY_TEXT_FIELDS = ("name", "opticalName", "address", "city", "state", "phone", "gstNumber")


def _sanitize_text(text: str, max_length: int = None) -> str:
    """Sanitize user input text."""
    if not text:
        return ""
    text = str(text).strip()
    text = bleach.clean(text, tags=[], strip=True)
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def require_json(request) -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    return payload


def parse_party(data: Optional[Dict[str, Any]]) -> Optional[PartySnapshot]:
    """Customer or vendor block, with its text fields sanitized."""
    if not isinstance(data, dict):
        return None
    cleaned = dict(data)
    for key in _PARTY_TEXT_FIELDS:
        if key in cleaned:
            cleaned[key] = _sanitize_text(cleaned[key], MAX_NAME_LENGTH)
    return PartySnapshot.from_dict(cleaned)


def parse_line_items(rows: Any) -> List[LineItem]:
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise ValidationError("items must be a list", field="items")
    items = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValidationError(f"item {index} must be an object", field="items")
        cleaned = dict(row)
        cleaned["itemName"] = _sanitize_text(cleaned.get("itemName"), MAX_NAME_LENGTH)
        items.append(LineItem.from_dict(cleaned))
    return items


def parse_date(value: Any, field: str) -> Optional[date]:
    """ISO date (YYYY-MM-DD); blank means not given."""
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"invalid date '{value}'", field=field)


def parse_discount(payload: Dict[str, Any]) -> DiscountConfig:
    discount = payload.get("discount")
    return DiscountConfig.from_dict(discount if isinstance(discount, dict) else payload)


def parse_payment(payload: Dict[str, Any]) -> PaymentInfo:
    payment = payload.get("payment")
    return PaymentInfo.from_dict(payment if isinstance(payment, dict) else payload)


def parse_freight(payload: Dict[str, Any]) -> Decimal:
    return bounded_decimal(payload.get("freightCharge", payload.get("freight", 0)), "freightCharge")


def parse_notes(payload: Dict[str, Any], max_length: int = MAX_NOTES_LENGTH) -> str:
    return _sanitize_text(payload.get("notes"), max_length)
