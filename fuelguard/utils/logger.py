# fuelguard/utils/logger.py
"""
Logging setup shared by the API, the QR sweeper and the setup scripts.

Records go to the console and to a size-rotated file. Where the file lives and
how it rotates come from settings (LOG_DIR, LOG_FILE, LOG_MAX_BYTES,
LOG_BACKUP_COUNT); a relative LOG_DIR is taken from the project root. The
directory is only created when the file handler is first attached.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from fuelguard.config import settings

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

CONSOLE_HANDLER = "fuelguard.console"
FILE_HANDLER = "fuelguard.file"

# Chatty at INFO: one line per SQL statement / per HTTP request
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx")

FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_file_path(log_dir: Optional[str] = None, log_file: Optional[str] = None) -> str:
    log_dir = log_dir or settings.LOG_DIR
    if not os.path.isabs(log_dir):
        log_dir = os.path.join(PROJECT_ROOT, log_dir)
    return os.path.join(log_dir, log_file or settings.LOG_FILE)


def configure_logging(target: Optional[logging.Logger] = None, level: Optional[str] = None,
                      log_dir: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach the named console and file handlers to `target` (the root logger by
    default). Handlers already attached under those names are kept, so calling
    this again only re-applies the level.
    """
    target = target if target is not None else logging.getLogger()
    level = (level or settings.LOG_LEVEL).upper()
    formatter = logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT)
    attached = {handler.get_name() for handler in target.handlers}

    if CONSOLE_HANDLER not in attached:
        console = logging.StreamHandler()
        console.set_name(CONSOLE_HANDLER)
        console.setFormatter(formatter)
        target.addHandler(console)

    if FILE_HANDLER not in attached:
        path = log_file_path(log_dir, log_file)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(formatter)
        target.addHandler(file_handler)

    target.setLevel(level)
    for handler in target.handlers:
        if handler.get_name() in (CONSOLE_HANDLER, FILE_HANDLER):
            handler.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return target


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    root = logging.getLogger()
    if not any(handler.get_name() == FILE_HANDLER for handler in root.handlers):
        configure_logging(root)
    return logging.getLogger(name)
