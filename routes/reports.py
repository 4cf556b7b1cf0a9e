"""
Report routes.

Handles:
- GET /api/reports/gst?from=YYYY-MM-DD&to=YYYY-MM-DD - GST period summary
"""

from flask import Blueprint, current_app, request

from core.exceptions import ValidationError
from logging_config import get_logger
from .payloads import parse_date


# Module logger
logger = get_logger(__name__)

reports_bp = Blueprint("reports", __name__)


@reports_bp.route("/api/reports/gst", methods=["GET"])
def gst_report():
    start_date = parse_date(request.args.get("from"), "from")
    end_date = parse_date(request.args.get("to"), "to")
    if start_date is None or end_date is None:
        raise ValidationError("both 'from' and 'to' dates are required")
    if start_date > end_date:
        raise ValidationError("'from' date is after 'to' date", field="from")

    report_service = current_app.config["GST_REPORT_SERVICE"]
    summary = report_service.aggregate(start_date, end_date)
    return summary.to_dict()
