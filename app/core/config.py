# app/core/config.py

import os
from decimal import Decimal

from dotenv import load_dotenv
from app.utils.logger import get_logger

logger = get_logger(__name__)

load_dotenv()

# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV")
if APP_ENV not in {"development", "staging", "production"}:
    raise ValueError("APP_ENV must be development | staging | production")

IS_PRODUCTION = APP_ENV == "production"

# Base URL used when building magic links sent to clients
NEXTAUTH_URL = os.getenv("NEXTAUTH_URL", "http://localhost:3000").rstrip("/")

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres")

elif DB_TYPE == "sqlite":
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed in production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./quotes.db")
    if not DATABASE_URL.startswith("sqlite+aiosqlite"):
        raise ValueError("DATABASE_URL must use sqlite+aiosqlite when DB_TYPE=sqlite")

# ---- Pool tuning (safe defaults) ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

# ---- SSL ----
DB_SSL_VERIFY = os.getenv("DB_SSL_VERIFY", "true").lower() == "true"
if IS_PRODUCTION and not DB_SSL_VERIFY:
    logger.warning("Running in production with relaxed SSL verification")

# =====================================================
# JWT / AUTH
# =====================================================
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    raise ValueError("JWT_SECRET_KEY must be set")

JWT_ALGORITHM = "HS256"

ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
)
MAGIC_LOGIN_TTL_HOURS = int(
    os.getenv("MAGIC_LOGIN_TTL_HOURS", 72)
)

# =====================================================
# QUOTES
# =====================================================
QUOTE_SEND_TTL_DAYS = int(os.getenv("QUOTE_SEND_TTL_DAYS", 7))

CUSTOM_PROJECT_SERVICE_SLUG = os.getenv("CUSTOM_PROJECT_SERVICE_SLUG", "custom-project")

# When the configured slug is missing, accept falls back to the oldest service
SERVICE_FALLBACK_TO_ANY = os.getenv("SERVICE_FALLBACK_TO_ANY", "true").lower() == "true"

# =====================================================
# REFERRALS
# =====================================================
REFERRAL_COOKIE_NAME = os.getenv("REFERRAL_COOKIE_NAME", "gt_ref")
DEFAULT_REFERRAL_RATE = Decimal(os.getenv("DEFAULT_REFERRAL_RATE", "0.1"))

# =====================================================
# EMAIL
# =====================================================
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_SECURE = os.getenv("SMTP_SECURE", "false").lower() == "true"
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
EMAIL_FROM = os.getenv("EMAIL_FROM") or SMTP_USER
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")
