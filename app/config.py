import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cleaning_ops.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Frontend base URL for links in notifications
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Scheduling <noreply@example.com>")

# Public holiday feed (gov.uk format: {"<division>": {"events": [{"date", "title"}]}})
HOLIDAYS_FEED_URL = os.getenv("HOLIDAYS_FEED_URL", "https://www.gov.uk/bank-holidays.json")
HOLIDAYS_DIVISION = os.getenv("HOLIDAYS_DIVISION", "england-and-wales")
HOLIDAY_CACHE_TTL_SECONDS = int(os.getenv("HOLIDAY_CACHE_TTL_SECONDS", str(24 * 60 * 60)))
HOLIDAY_FETCH_TIMEOUT = float(os.getenv("HOLIDAY_FETCH_TIMEOUT", "10.0"))

# Recurring series expansion
RECURRENCE_MAX_OCCURRENCES = int(os.getenv("RECURRENCE_MAX_OCCURRENCES", "52"))  # Safety cap
RECURRENCE_DEFAULT_MONTHS = int(os.getenv("RECURRENCE_DEFAULT_MONTHS", "3"))


def _int_list(raw: str) -> list[int]:
    return [int(part) for part in raw.split(",") if part.strip()]


# Payment reminder policy - days relative to the invoice due date
REMINDER_DAYS_BEFORE_DUE = _int_list(os.getenv("REMINDER_DAYS_BEFORE_DUE", "7,3,1"))
REMINDER_DAYS_AFTER_DUE = _int_list(os.getenv("REMINDER_DAYS_AFTER_DUE", "1,7,14,30"))
