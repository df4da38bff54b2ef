import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() not in ("0", "false", "no")


class Config:
    # --------------------------
    # 🔹 Flask Configuration
    # --------------------------
    SECRET_KEY = os.environ.get("SECRET_KEY", "secret123")
    PROPAGATE_EXCEPTIONS = True
    # Secure cookie/session defaults (tunable via env)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = _flag("SESSION_COOKIE_SECURE", "1")
    PERMANENT_SESSION_LIFETIME = int(os.environ.get("SESSION_LIFETIME_SECONDS", "28800"))  # 8 hours
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Flask-Limiter reads this key directly
    RATELIMIT_ENABLED = not _flag("DISABLE_RATE_LIMITING", "0")
    LOGIN_RATE_LIMIT = os.environ.get("LOGIN_RATE_LIMIT", "10 per minute")

    # --------------------------
    # 🔹 Branding
    # --------------------------
    INSTITUTION_NAME = os.environ.get("INSTITUTION_NAME", "SUP'PTIC")
    PORTAL_TITLE = os.environ.get("PORTAL_TITLE", "Academic Administration")
    APP_NAME = os.environ.get("APP_NAME", f"{INSTITUTION_NAME} {PORTAL_TITLE}")
    CURRENCY = os.environ.get("CURRENCY", "XOF")

    # --------------------------
    # 🔹 Demo login (stub authentication)
    # --------------------------
    # One shared secret for the three built-in staff accounts
    DEMO_PASSWORD = os.environ.get("DEMO_PASSWORD", "password")
    try:
        AUTH_DELAY_SECONDS = float(os.environ.get("AUTH_DELAY_SECONDS", "0"))
    except ValueError:
        AUTH_DELAY_SECONDS = 0.0

    # --------------------------
    # 🔹 Grading & reports
    # --------------------------
    GRADE_SCALE_MAX = float(os.environ.get("GRADE_SCALE_MAX", "20"))
    PASS_MARK = float(os.environ.get("PASS_MARK", "10"))
    AVERAGE_PRECISION = int(os.environ.get("AVERAGE_PRECISION", "2"))
    EXPORT_FORMATS = tuple(
        f.strip().lower() for f in os.environ.get("EXPORT_FORMATS", "csv,xlsx,pdf").split(",") if f.strip()
    )
    ACTIVITY_LOG_SIZE = int(os.environ.get("ACTIVITY_LOG_SIZE", "50"))

    # Seed the in-memory store with the reference data set on startup
    SEED_REFERENCE_DATA = _flag("SEED_REFERENCE_DATA", "1")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test_secret"
    SESSION_COOKIE_SECURE = False
    RATELIMIT_ENABLED = False
    AUTH_DELAY_SECONDS = 0.0
    DEMO_PASSWORD = "password"
    SEED_REFERENCE_DATA = True
