import json
import logging
import sys
from datetime import datetime, timezone

from .config import get_settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("recipebook")


def setup_logging(level: str | None = None):
    """
    Configure the package logger with a StreamHandler on stdout.
    Calling it again only updates the level.
    """
    level = (level or get_settings().LOG_LEVEL).upper()
    logger.setLevel(level)

    if not any(getattr(h, "_recipebook", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._recipebook = True
        logger.addHandler(handler)

    return logger


def log_event(event: str, level: int = logging.INFO, **fields):
    """
    Logs a structured event as a single JSON line.
    """
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
        **fields,
    }
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
