"""
Environment-driven settings for the revenue and bonus service.

Values are read once at import time from the process environment (and a
local .env file when present).
"""
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database configuration
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = int(os.getenv("DB_PORT", "3306"))

# Full URL wins over the individual DB_* parts (used for SQLite in local runs)
DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# Business calendar
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Asia/Riyadh")

# Tier table as JSON, e.g. [{"tier": "tier_1", "min_revenue": "1200", "amount": "35"}]
# Parsed by services.bonus_tiers; unset means the default table.
BONUS_TIERS = os.getenv("BONUS_TIERS", "")

# Notifications
NOTIFY_WEBHOOK_URL = os.getenv("NOTIFY_WEBHOOK_URL", "")
NOTIFY_TIMEOUT = float(os.getenv("NOTIFY_TIMEOUT", "10"))
BONUS_ADMIN_EMAILS = [
    email.strip()
    for email in os.getenv("BONUS_ADMIN_EMAILS", "").split(",")
    if email.strip()
]

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
