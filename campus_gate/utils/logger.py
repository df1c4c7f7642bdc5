# campus_gate/utils/logger.py
"""
Centralised logging configuration for the entire application.
Logs to console and to a rotating file in /logs/.
Scan decisions also go to their own audit file (logs/scan_audit.log) so the
gate trail survives debug noise and log rotation of gate.log.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from campus_gate.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
os.makedirs(LOG_DIR, exist_ok=True)

AUDIT_LOGGER_NAME = "campus_gate.audit"

_configured = False


def _rotating_file(filename: str, max_mb: int, backups: int, fmt: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=max_mb * 1024 * 1024,
        backupCount=backups,
        encoding="utf-8",
    )
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    # gate.log: everything at LOG_LEVEL, last 10 × 5MB
    file_handler = _rotating_file("gate.log", 5, 10, fmt)
    file_handler.setLevel(LOG_LEVEL)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(file_handler)

    # scan_audit.log: one line per verdict, kept longer, independent of LOG_LEVEL
    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    audit.setLevel(logging.INFO)
    audit.addHandler(_rotating_file(
        "scan_audit.log", 10, 30,
        logging.Formatter(fmt="%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"),
    ))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)


def get_audit_logger() -> logging.Logger:
    """Logger for scan verdicts. Also propagates to the console and gate.log."""
    _configure_root_logger()
    return logging.getLogger(AUDIT_LOGGER_NAME)
