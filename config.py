"""
Configuration for OpticalPOS.

Settings come from the environment, with a .env file loaded first.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env early so environment variables are available to the Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    TESTING = False

    # Document store
    # Path to the JSON data file. Empty means an in-memory store that is
    # lost on restart (useful for demos).
    STORE_PATH = os.environ.get("STORE_PATH", str(BASE_DIR / "data" / "store.json"))

    # ==========================================================================
    # Invoicing
    # ==========================================================================
    # FINANCIAL_YEAR: invoice number prefix, e.g. "2024-2025".
    #   Empty = derived from today's date (April to March).
    FINANCIAL_YEAR = os.environ.get("FINANCIAL_YEAR", "")
    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₹")
    MAX_NOTES_LENGTH = int(os.environ.get("MAX_NOTES_LENGTH", "1000"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    STORE_PATH = ""
    FINANCIAL_YEAR = "2024-2025"
