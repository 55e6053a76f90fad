import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from timeclock.core.config import settings

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
ACCESS_FORMAT = '%(asctime)s - %(message)s'


def _rotating_handler(path: Path, level: int, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging() -> logging.Logger:
    """
    Configure application logging.

    Console plus app.log at LOG_LEVEL, error.log for ERROR and above, and a
    non-propagating "access" logger that writes one line per HTTP request to
    access.log.
    """
    log_dir = settings.LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(log_dir / "app.log", level, FILE_FORMAT))
    root_logger.addHandler(_rotating_handler(log_dir / "error.log", logging.ERROR, FILE_FORMAT))

    access_logger = logging.getLogger("access")
    access_logger.setLevel(logging.INFO)
    access_logger.handlers.clear()
    access_logger.addHandler(_rotating_handler(log_dir / "access.log", logging.INFO, ACCESS_FORMAT))
    access_logger.propagate = False

    # Statement echo is far too noisy for the kiosk traffic
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return root_logger
