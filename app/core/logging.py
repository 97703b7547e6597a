"""Logging configuration."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# pdfminer logs every parsed object at DEBUG; openai/httpx log each request
NOISY_LOGGERS = ("pdfminer", "httpx", "httpcore", "openai")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging from LOG_LEVEL (default INFO)."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
