"""
Purchase routes.

Handles:
- POST /api/purchases - Save a vendor purchase
"""

from flask import Blueprint, current_app, request

from logging_config import get_logger
from .payloads import (
    MAX_NAME_LENGTH,
    _sanitize_text,
    parse_date,
    parse_discount,
    parse_freight,
    parse_line_items,
    parse_notes,
    parse_party,
    parse_payment,
    require_json,
)


# Module logger
logger = get_logger(__name__)

purchases_bp = Blueprint("purchases", __name__)


@purchases_bp.route("/api/purchases", methods=["POST"])
def create_purchase():
    payload = require_json(request)
    purchase_service = current_app.config["PURCHASE_SERVICE"]

    purchase_number = _sanitize_text(payload.get("purchaseNumber"), MAX_NAME_LENGTH)
    purchase_id = purchase_service.save_purchase(
        vendor=parse_party(payload.get("vendor")),
        line_items=parse_line_items(payload.get("items")),
        discount=parse_discount(payload),
        tax_option_id=payload.get("taxOption") or "TAX_FREE",
        freight=parse_freight(payload),
        payment=parse_payment(payload),
        purchase_number=purchase_number,
        purchase_date=parse_date(payload.get("purchaseDate"), "purchaseDate"),
        notes=parse_notes(payload, current_app.config.get("MAX_NOTES_LENGTH", 1000)),
    )

    logger.info(f"Purchase {purchase_id} created via API")
    return {"purchaseId": purchase_id, "purchaseNumber": purchase_number}, 201
