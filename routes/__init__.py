"""
Flask route blueprints for OpticalPOS.

This module contains all route handlers organized by functionality:
- sales: Save sales, live totals, next invoice number
- purchases: Save vendor purchases
- reports: GST period summary
- api: Order lookup, tax catalog, prescription formatting, health

All endpoints speak JSON. Each blueprint is registered with the Flask app
in create_app().
"""

from .sales import sales_bp
from .purchases import purchases_bp
from .reports import reports_bp
from .api import api_bp

__all__ = [
    "sales_bp",
    "purchases_bp",
    "reports_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(sales_bp)
    app.register_blueprint(purchases_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(api_bp)
