"""
Configuration for the Euro Arcade Flask app.
Everything comes from the environment; the defaults are for local development.
"""
import os
from pathlib import Path
from datetime import timedelta


def _env_flag(name, default="false"):
    return os.environ.get(name, default).lower() in ("true", "on", "1")


def _env_float(name, default):
    try:
        return float(os.environ.get(name) or default)
    except ValueError:
        return default


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"

    BASE_DIR = Path(__file__).parent
    DATA_DIR = Path(os.environ.get("DATA_DIR") or BASE_DIR / "data")

    # Sessions: opaque tokens stored server-side, sent back as a cookie or bearer header
    SESSION_TOKEN_COOKIE = "session_token"
    SESSION_LIFETIME = timedelta(days=7)
    SESSION_TOKEN_BYTES = 32
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    VERIFICATION_TOKEN_LIFETIME = timedelta(hours=24)
    VERIFICATION_TOKEN_BYTES = 24

    PASSWORD_MIN_LENGTH = 8
    DISPLAY_NAME_MAX_LENGTH = 60

    # First account registered while no admin exists is promoted (legacy behaviour)
    BOOTSTRAP_FIRST_ADMIN = _env_flag("BOOTSTRAP_FIRST_ADMIN", "true")

    APP_BASE_URL = (os.environ.get("APP_BASE_URL") or "http://localhost:3000").rstrip("/")

    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = int(os.environ.get("MAIL_PORT") or 587)
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "true")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER") or os.environ.get("MAIL_USERNAME") or "no-reply@euro-arcade.local"
    MAIL_OUTBOX_DIR = Path(os.environ.get("MAIL_OUTBOX_DIR") or DATA_DIR / "outbox")

    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID")
    GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"

    PAYPAL_CLIENT_ID = os.environ.get("PAYPAL_CLIENT_ID")
    PAYPAL_CLIENT_SECRET = os.environ.get("PAYPAL_CLIENT_SECRET")
    PAYPAL_API_BASE = (os.environ.get("PAYPAL_API_BASE") or "https://api-m.sandbox.paypal.com").rstrip("/")
    PAYPAL_CURRENCY = os.environ.get("PAYPAL_CURRENCY") or "USD"
    EURO_UNIT_PRICE = _env_float("EURO_UNIT_PRICE", 1.0)

    UPSTREAM_TIMEOUT_SECONDS = _env_float("UPSTREAM_TIMEOUT_SECONDS", 10.0)
