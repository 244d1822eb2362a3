"""
Centralised application settings loaded from environment variables / .env file.
Every setting has a local-development default; production overrides via env.
"""
import os

import pytz
from dotenv import load_dotenv

load_dotenv()


def _timezone(key: str, default: str) -> str:
    """Read a timezone name and fail fast if pytz does not know it."""
    value = os.getenv(key, default).strip() or default
    try:
        pytz.timezone(value)
    except pytz.UnknownTimeZoneError:
        raise RuntimeError(f"{key}={value!r} is not a known timezone name")
    return value


class _Settings:
    # ── MongoDB ───────────────────────────────────────────────────────────────
    MONGO_URI: str     = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "sleep_rewards")

    # ── Day bucketing ─────────────────────────────────────────────────────────
    # Calendar day used for the one-log-per-day rule and for naive input times.
    DAY_BOUNDARY_TZ: str = _timezone("DAY_BOUNDARY_TZ", "UTC")

    # ── Summaries ─────────────────────────────────────────────────────────────
    WEEKLY_WINDOW_DAYS: int = int(os.getenv("WEEKLY_WINDOW_DAYS", "7"))
    RECENT_LOGS_LIMIT: int  = int(os.getenv("RECENT_LOGS_LIMIT", "10"))

    # ── HTTP / logging ────────────────────────────────────────────────────────
    LOG_LEVEL: str          = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]


settings = _Settings()
