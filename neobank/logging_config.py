"""
Logging configuration for the NeoBank API.

Sets up a console handler on the "neobank" logger and, when LOG_FILE is
configured, a size-rotated file handler next to it. Modules obtain their
loggers with logging.getLogger(__name__).
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from neobank.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def setup_logging() -> None:
    """
    Configure the root logger and the neobank service logger.

    Safe to call more than once; existing neobank handlers are replaced.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    service_logger = logging.getLogger("neobank")
    service_logger.setLevel(level)
    # Avoid duplicate handlers if setup_logging is called multiple times
    service_logger.handlers = []
    service_logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    service_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        service_logger.addHandler(file_handler)

    # SQL echo is controlled by DEBUG on the engine; keep the logger itself quiet
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
