"""
API routes (lookups and helpers for the sale form).

Handles:
- /api/orders/resolve/<reference> - Look up an order by display id
- /api/tax-options - Sale and purchase tax catalogs
- /api/format/optical - Canonical SPH/CYL/ADD notation
- /health - Health check endpoint
"""

from flask import Blueprint, current_app, request

from modules.formatting import format_axis, format_optical_value
from modules.tax_options import PURCHASE_TAX_OPTIONS, SALE_TAX_OPTIONS
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/api/orders/resolve/<reference>", methods=["GET"])
def resolve_order(reference: str):
    """
    Resolve an order reference typed on an invoice line.

    Returns the order summary and the invoice line it pre-fills, or 404.
    """
    resolver = current_app.config["ORDER_RESOLVER"]
    order = resolver.resolve(reference)
    if order is None:
        return {"error": f"No order matches '{reference}'", "reference": reference}, 404

    return {
        "reference": reference,
        "order": {
            "id": order.id,
            "displayId": order.display_id,
            "status": order.status,
            "customerId": order.customer_id,
            "customerName": order.customer_name,
            "brandName": order.brand_name,
            "deductible": order.is_deductible,
        },
        "line": resolver.line_from_order(order).to_dict(),
    }


@api_bp.route("/api/tax-options", methods=["GET"])
def tax_options():
    return {
        "sale": [option.to_dict() for option in SALE_TAX_OPTIONS],
        "purchase": [option.to_dict() for option in PURCHASE_TAX_OPTIONS],
    }


@api_bp.route("/api/format/optical", methods=["POST"])
def format_optical():
    """
    Format prescription fields.

    Body: {"sph": "-1.5", "cyl": "0", "axis": "90.0", "add": "2"}
    Only the fields present in the body are returned.
    """
    payload = request.get_json(silent=True) or {}
    formatted = {}
    for field in ("sph", "cyl", "add"):
        if field in payload:
            formatted[field] = format_optical_value(payload[field])
    if "axis" in payload:
        formatted["axis"] = format_axis(payload["axis"])
    return formatted


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with service status."""
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    for key, name in (
        ("DOCUMENT_STORE", "store"),
        ("INVOICE_SERVICE", "invoice_service"),
        ("PURCHASE_SERVICE", "purchase_service"),
        ("GST_REPORT_SERVICE", "gst_report_service"),
    ):
        if current_app.config.get(key) is not None:
            health_status["checks"][name] = "ok"
        else:
            health_status["checks"][name] = "not_available"
            health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
