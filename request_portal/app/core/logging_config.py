"""
Logging setup for the portal.

``setup_logging`` attaches a console handler and, when a log file is
configured, a size-rotated file handler to the root logger.  It is a
no-op once the root logger has handlers, so uvicorn, pytest or a
second ``create_app`` call keep their own configuration.

HTTP client libraries are capped at WARNING unless the portal itself
runs at DEBUG: the Sheets session would otherwise log every call.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOISY_LOGGERS = ("urllib3", "google.auth", "httpx", "httpcore")


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    noisy_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"`` or ``"info"``.  Unknown names
        fall back to INFO.
    logfile : Optional[str]
        File to write to in addition to the console.  Rotated at 5 MB,
        three backups kept.
    noisy_loggers : Iterable[str]
        Loggers capped at WARNING unless ``level`` is DEBUG.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    root.setLevel(numeric_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(
            RotatingFileHandler(Path(logfile).resolve(), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in noisy_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)
