# config.py: every value can be overridden by an environment variable

import os
from datetime import datetime


def utcnow() -> datetime:
    return datetime.utcnow()


def today():
    """The calendar date shared by jobs, validators and report defaults (UTC)."""
    return utcnow().date()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./budget.db")

# Authentication
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Budget alerts
BUDGET_ALERT_THRESHOLD = float(os.getenv("BUDGET_ALERT_THRESHOLD", "80"))
ALERT_SWEEP_INTERVAL_HOURS = int(os.getenv("ALERT_SWEEP_INTERVAL_HOURS", "6"))
# 0 disables the cooldown: over-threshold budgets alert on every sweep
ALERT_COOLDOWN_HOURS = int(os.getenv("ALERT_COOLDOWN_HOURS", "0"))

# Pagination
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "200"))

SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_CATEGORIES = [
    "Food",
    "Transport",
    "Housing",
    "Utilities",
    "Entertainment",
    "Health",
    "Shopping",
    "Salary",
    "Other",
]
