"""
Configuration for the Staff Wallet API.
Production: uses DATABASE_URL only; fails if missing.
Local: DATABASE_URL or DB_* fallback.
"""
import os
from pathlib import Path
from urllib.parse import quote_plus


def _env_flag(name, default="false"):
    return os.environ.get(name, default).strip().lower() in ("true", "on", "1", "yes")


def _is_production():
    """True when running on Railway, Render, or explicit production."""
    return (
        os.environ.get("RENDER") == "true"
        or os.environ.get("RAILWAY_ENVIRONMENT") is not None
        or os.environ.get("APP_ENV") == "production"
        or os.environ.get("FLASK_ENV") == "production"
    )


def _normalize_database_url(url):
    """Convert postgres:// to postgresql+psycopg2:// for SQLAlchemy/psycopg2."""
    if not url:
        return url
    url = url.strip()
    if url.startswith("postgres://"):
        return "postgresql+psycopg2://" + url[11:]
    if url.startswith("postgresql://") and "psycopg2" not in url:
        return "postgresql+psycopg2://" + url[13:]
    return url


def _get_database_uri():
    """Database URI: production = DATABASE_URL only; local = DATABASE_URL or DB_*."""
    url = os.environ.get("DATABASE_URL")
    if _is_production():
        if not url or not url.strip():
            raise RuntimeError(
                "DATABASE_URL is required in production. "
                "Set it in your service environment variables."
            )
        return _normalize_database_url(url)

    if url and url.strip():
        return _normalize_database_url(url)

    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    name = os.environ.get("DB_NAME", "staffwallet")
    user = os.environ.get("DB_USER", "staffwallet")
    password = os.environ.get("DB_PASSWORD", "")
    if password:
        password = quote_plus(password)
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"
    PRODUCTION = _is_production()

    BASE_DIR = Path(__file__).parent
    SQLALCHEMY_DATABASE_URI = _get_database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_DAYS = int(os.environ.get("JWT_EXPIRES_DAYS") or 30)

    # Email OTP
    OTP_DIGITS = int(os.environ.get("OTP_DIGITS") or 6)
    OTP_EXPIRY_MINUTES = int(os.environ.get("OTP_EXPIRY_MINUTES") or 5)
    OTP_MAX_ATTEMPTS = int(os.environ.get("OTP_MAX_ATTEMPTS") or 5)
    OTP_RESEND_COOLDOWN_SECONDS = int(os.environ.get("OTP_RESEND_COOLDOWN_SECONDS") or 60)

    # SMTP (Flask-Mail)
    MAIL_SERVER = os.environ.get("MAIL_SERVER") or os.environ.get("SMTP_HOST")
    MAIL_PORT = int(os.environ.get("MAIL_PORT") or os.environ.get("SMTP_PORT") or 587)
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "true")
    MAIL_USE_SSL = _env_flag("MAIL_USE_SSL", "false")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME") or os.environ.get("SMTP_USER")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD") or os.environ.get("SMTP_PASS")
    MAIL_DEFAULT_SENDER = (
        os.environ.get("MAIL_DEFAULT_SENDER")
        or os.environ.get("SMTP_FROM")
        or MAIL_USERNAME
        or "noreply@staffwallet.local"
    )
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL")

    # Comma-separated origins; empty or "*" allows all
    CORS_DOMAINS = os.environ.get("CORS_DOMAINS", "*")

    # Request signing for the user and staff APIs
    API_SIGNATURE_REQUIRED = _env_flag("API_SIGNATURE_REQUIRED", "false")
    SKIP_API_SIGNATURE = _env_flag("SKIP_API_SIGNATURE", "false")
    SIGNATURE_TIME_WINDOW_MS = int(os.environ.get("SIGNATURE_TIME_WINDOW_MS") or 30000)
    CLIENT_KEY_FILE = os.environ.get("CLIENT_KEY_FILE") or str(BASE_DIR / "client.key")

    # Scheduled jobs
    APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "Asia/Kolkata")
    SCHEDULER_ENABLED = _env_flag("SCHEDULER_ENABLED", "true")
    SCHEDULER_ITEM_DELAY = float(os.environ.get("SCHEDULER_ITEM_DELAY") or 0.1)
    DEFAULT_CHECK_IN_TIME = "09:00:00"
    DEFAULT_CHECK_OUT_TIME = "17:00:00"

    SEED_ADMIN_EMAIL = os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com").strip().lower()
    SEED_ADMIN_PASSWORD = os.environ.get("SEED_ADMIN_PASSWORD", "admin123")
    SEED_ADMIN_NAME = os.environ.get("SEED_ADMIN_NAME", "Admin User")


class TestingConfig(Config):
    """In-memory database, no real mail, no background jobs."""
    TESTING = True
    PRODUCTION = False
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret"
    JWT_SECRET = "test-jwt-secret"
    MAIL_SERVER = "localhost"
    MAIL_USERNAME = "tester"
    MAIL_DEFAULT_SENDER = "noreply@test.local"
    MAIL_SUPPRESS_SEND = True
    ADMIN_EMAIL = "hr@test.local"
    CORS_DOMAINS = "*"
    API_SIGNATURE_REQUIRED = False
    SCHEDULER_ENABLED = False
    SCHEDULER_ITEM_DELAY = 0
    OTP_DIGITS = 6
    OTP_EXPIRY_MINUTES = 5
    OTP_MAX_ATTEMPTS = 5
    OTP_RESEND_COOLDOWN_SECONDS = 60
