"""
Sales routes.

Handles:
- POST /api/sales - Save a sale, reconcile orders and stock
- POST /api/sales/preview - Totals for a sale being built (nothing saved)
- GET /api/sales/next-number - Invoice number the next sale will get
"""

from flask import Blueprint, current_app, request

from modules.calculator import (
    compute_totals,
    display_balance_due,
    resolve_amount_paid,
    total_quantities,
)
from modules.formatting import format_currency, money_str
from modules.tax_options import SALE_TAX_OPTIONS, get_tax_option
from logging_config import get_logger
from .payloads import (
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

sales_bp = Blueprint("sales", __name__)


@sales_bp.route("/api/sales", methods=["POST"])
def create_sale():
    """
    Save a sale.

    The response is 201 whenever the invoice was written, even if some
    order references failed to reconcile; check "fullyReconciled".
    """
    payload = require_json(request)
    invoice_service = current_app.config["INVOICE_SERVICE"]

    result = invoice_service.save_invoice(
        customer=parse_party(payload.get("customer")),
        line_items=parse_line_items(payload.get("items")),
        discount=parse_discount(payload),
        tax_option_id=payload.get("taxOption") or "TAX_FREE",
        freight=parse_freight(payload),
        payment=parse_payment(payload),
        invoice_date=parse_date(payload.get("invoiceDate"), "invoiceDate"),
        due_date=parse_date(payload.get("dueDate"), "dueDate"),
        notes=parse_notes(payload, current_app.config.get("MAX_NOTES_LENGTH", 1000)),
    )

    logger.info(f"Sale {result.invoice_number} created via API")
    return result.to_dict(), 201


@sales_bp.route("/api/sales/preview", methods=["POST"])
def preview_sale():
    """
    Live totals for the sale form.

    Unknown tax options fall back to tax free here; the save rejects them.
    """
    payload = require_json(request)
    items = parse_line_items(payload.get("items"))
    discount = parse_discount(payload)
    payment = parse_payment(payload)
    tax_option = get_tax_option(payload.get("taxOption"), SALE_TAX_OPTIONS)

    totals = compute_totals(
        items,
        discount_type=discount.type,
        discount_value=discount.value,
        tax_rate=tax_option.rate,
        freight=parse_freight(payload),
    )
    paid = resolve_amount_paid(payment.status.value, payment.amount_paid, totals.total)
    quantities = total_quantities(items)

    return {
        "taxOption": tax_option.to_dict(),
        "totals": totals.to_dict(),
        "amountPaid": money_str(paid),
        "totalDisplay": format_currency(totals.total, current_app.config.get("CURRENCY_SYMBOL", "₹")),
        "balanceDue": money_str(display_balance_due(totals.total, paid)),
        "quantities": {
            "pairs": str(quantities.pairs),
            "services": str(quantities.services),
            "others": str(quantities.others),
        },
    }


@sales_bp.route("/api/sales/next-number", methods=["GET"])
def next_invoice_number():
    invoice_service = current_app.config["INVOICE_SERVICE"]
    invoice_date = parse_date(request.args.get("date"), "date")
    number = invoice_service.next_invoice_number(invoice_date)
    return {
        "prefix": number.prefix,
        "number": number.number,
        "invoiceNumber": number.full_display,
    }
