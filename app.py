"""
OpticalPOS - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (.env first, then a Config class)
2. Configures logging
3. Opens the document store (JSON file, or in-memory when no path is set)
4. Wires the services onto the store
5. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Flask request thread
    └── InvoiceService.save_invoice()
        ├── store write (invoice)       - must succeed
        ├── store write (payment)       - logged on failure
        └── InventoryReconciler         - per line, failures captured

All store calls for one request run sequentially on the request thread.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.document_store import DocumentStore, create_store
from core.exceptions import OpticalPosError, PersistenceFailure, ValidationError
from services import (
    GstReportService,
    InventoryReconciler,
    InvoiceService,
    OrderResolver,
    PurchaseService,
)
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In PyInstaller bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent


def create_app(
    config_object: str = "config.Config",
    store: Optional[DocumentStore] = None
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path (or class) of the configuration to load
        store: Document store to use instead of the configured one

    Returns:
        Configured Flask application

    Raises:
        StoreError: If the configured JSON store file cannot be read
    """
    # Use override=True so .env file always takes precedence over shell environment
    base_path = _get_base_path()
    env_file = base_path / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production" and not app.config.get("TESTING")

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting OpticalPOS in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # STORE AND SERVICES
    # =========================================================================

    if store is None:
        store = create_store(app.config.get("STORE_PATH", ""))
    app.config["DOCUMENT_STORE"] = store
    logger.info(f"Document store ready: {type(store).__name__}")

    resolver = OrderResolver(store)
    reconciler = InventoryReconciler(store, resolver)
    app.config["ORDER_RESOLVER"] = resolver
    app.config["INVOICE_SERVICE"] = InvoiceService(
        store,
        reconciler,
        financial_year=app.config.get("FINANCIAL_YEAR", ""),
    )
    app.config["PURCHASE_SERVICE"] = PurchaseService(store)
    app.config["GST_REPORT_SERVICE"] = GstReportService(store)

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        logger.info(f"Rejected request: {e}")
        return {"error": e.message, "field": e.field}, 400

    @app.errorhandler(PersistenceFailure)
    def handle_persistence_failure(e):
        logger.error(f"Persistence failure: {e}")
        return {"error": e.message}, 500

    @app.errorhandler(OpticalPosError)
    def handle_app_error(e):
        logger.error(f"Unhandled application error: {e}", exc_info=True)
        return {"error": e.message}, 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return {"error": e.description}, e.code

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
