"""Logging configuration for the application."""
import logging
import sys

from app.config import settings

_configured = False


def setup_logging():
    """Configure the root logger with a single stdout handler."""
    global _configured
    if _configured:
        return

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL.upper())
    root_logger.addHandler(console_handler)

    # Set higher log levels for noisy components
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)

    _configured = True
