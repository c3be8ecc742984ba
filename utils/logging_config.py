"""
Logging configuration for the Pick A Side API.

Console logging always; a rotating file when LOG_FILE is set.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

SENSITIVE_KEYS = ('password', 'token', 'secret', 'key', 'authorization', 'database_url')


def setup_logging(log_level="INFO", log_file=None):
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Drop handlers from a previous setup_logging call, keep foreign ones (pytest caplog)
    for handler in list(logger.handlers):
        if getattr(handler, '_pickaside', False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    console_handler._pickaside = True
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        file_handler._pickaside = True
        logger.addHandler(file_handler)

    # Set levels for third-party libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def sanitize_log_data(data: dict) -> dict:
    """Copy of ``data`` with secret-looking values redacted"""
    sanitized = dict(data)
    for key in sanitized:
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
    return sanitized
