"""
Logging setup for the ApplyMate engine.

Console output is colored by level; LOG_DIR receives a rotating
`<name>.log` with everything and a `<name>_errors.log` with errors only.
Engine modules just use logging.getLogger(__name__) and inherit this.
"""

import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.config import get_config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class ColoredFormatter(logging.Formatter):
    """Level names in ANSI colors, for terminals."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return super().format(record)
        # copy so file handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = color + record.levelname + self.RESET
        return super().format(colored)


def _file_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(name: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure a logger once and return it.

    Args:
        name: Logger name; None configures the root logger so every module
            logger inherits the handlers
        log_dir: Directory for the log files (default LOG_DIR)
    """
    cfg = get_config()
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, cfg.LOG_LEVEL, logging.INFO))

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG)
    console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    directory = Path(log_dir or cfg.LOG_DIR)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"File logging disabled, cannot create {directory}: {e}")
        return logger

    stem = name or "applymate"
    logger.addHandler(_file_handler(directory / f"{stem}.log", logging.DEBUG))
    logger.addHandler(_file_handler(directory / f"{stem}_errors.log", logging.ERROR))
    return logger


_session_logger = logging.getLogger("applymate.session")


def log_session_event(owner_id: str, event: str, details: str = None):
    """Log a session lifecycle event."""
    _session_logger.info(f"Session [{owner_id}] {event}: {details}" if details else f"Session [{owner_id}] {event}")


def log_attempt(owner_id: str, attempt) -> None:
    """Log an application attempt outcome."""
    listing = attempt.listing
    line = f"Session [{owner_id}] {listing.title} @ {listing.company} -> {attempt.outcome.value}"
    if attempt.success:
        _session_logger.info(line)
    else:
        _session_logger.warning(line)
