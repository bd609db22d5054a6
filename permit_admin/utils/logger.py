# permit_admin/utils/logger.py
"""
Logging setup shared by every module: console output, plus a rotating
permits.log under settings.LOG_DIR when one is configured.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from permit_admin.config import settings

CONSOLE_HANDLER = "permit_admin.console"
FILE_HANDLER = "permit_admin.file"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(log_dir=None, level=None) -> logging.Logger:
    """Attach the app handlers to the root logger. Safe to call repeatedly."""
    root = logging.getLogger()
    installed = {h.get_name() for h in root.handlers}
    level = (level or settings.LOG_LEVEL).upper()
    log_dir = settings.LOG_DIR if log_dir is None else log_dir
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root.setLevel(level)
    if CONSOLE_HANDLER not in installed:
        console = logging.StreamHandler()
        console.set_name(CONSOLE_HANDLER)
        console.setLevel(level)
        console.setFormatter(fmt)
        root.addHandler(console)

    if log_dir and FILE_HANDLER not in installed:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=os.path.join(log_dir, "permits.log"),
            maxBytes=settings.LOG_FILE_MAX_BYTES,
            backupCount=settings.LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.set_name(FILE_HANDLER)
        file_handler.setLevel(level)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    configure_logging()
    return logging.getLogger(name)
