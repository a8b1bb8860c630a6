"""Per-concern loggers for the inventory service.

Each concern (ledger writes, reports, reconciliation, errors) gets its own
logger writing to stdout and, outside production, to its own rotating file
configured under ``logging.files`` in ``config/config.yml``.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import LoggingConfig, get_config


def _stdout_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(formatter)
    return handler


def _rotating_handler(path: str, settings: LoggingConfig, formatter: logging.Formatter) -> logging.Handler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=settings.max_bytes, backupCount=settings.backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Return the named logger, attaching handlers on first use.

    Args:
        name: Logger name
        log_file: Rotating file for this concern; ignored in production,
            where stdout is the only sink
        level: Level override, defaults to ``logging.level``

    Returns:
        The configured logger
    """
    config = get_config()
    settings = config.logging

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, (level or settings.level).upper()))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(settings.format)
    logger.addHandler(_stdout_handler(formatter))
    if log_file and not config.is_production:
        logger.addHandler(_rotating_handler(log_file, settings, formatter))

    return logger


def get_ledger_logger() -> logging.Logger:
    """Stock-in / stock-out writes, counter phases and registry edits."""
    return setup_logger("ledger", get_config().logging.files.ledger)


def get_report_logger() -> logging.Logger:
    return setup_logger("reports", get_config().logging.files.reports)


def get_reconcile_logger() -> logging.Logger:
    """Reconciliation runs, drifts found and repairs made."""
    return setup_logger("reconcile", get_config().logging.files.reconcile)


def get_error_logger() -> logging.Logger:
    """Errors only, with tracebacks, from every concern."""
    return setup_logger("error", get_config().logging.files.error, "ERROR")


def get_api_logger() -> logging.Logger:
    return setup_logger("api")


def get_scheduler_logger() -> logging.Logger:
    """APScheduler's own logger; job failures in its threads surface here."""
    return setup_logger("apscheduler")
