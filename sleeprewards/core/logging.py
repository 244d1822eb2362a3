"""Process-wide logging setup applied once at application startup."""
import logging

from sleeprewards.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
    )
