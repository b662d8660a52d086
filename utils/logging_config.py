"""
Logging setup for the booking service.

Every module logger writes to stdout. Modules that own a log file
(``bookings.log`` for the booking flow, ``webapp.log`` for the HTTP API)
also get a rotating file handler inside ``settings.log_dir``. Modules that
open the same file share one handler, so rotation never races.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from config import settings

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(message)s"
)
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUPS = 5

_file_handlers: Dict[Path, RotatingFileHandler] = {}


def _file_handler(path: Path, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = _file_handlers.get(path)
    if handler is None:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        _file_handlers[path] = handler
    return handler


def setup_logging(
    name: str,
    log_file: Optional[str] = None,
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Configure a module logger.

    Args:
        name: Logger name (typically __name__)
        log_file: File name inside the log directory; console only when omitted
        log_level: Overrides ``settings.log_level``
        log_dir: Overrides ``settings.log_dir``

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Already configured by an earlier import
    if logger.handlers:
        return logger

    level_name = (log_level or settings.log_level).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_dir or settings.log_dir) / log_file
        logger.addHandler(_file_handler(path.resolve(), formatter))

    return logger
