"""Logging setup shared by the API server and the workflow engine.

Everything under the ``coursereg`` logger goes to one size-rotated file,
optionally mirrored to stderr.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "coursereg"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "coursereg.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_PERSONAL_DATA = [
    (re.compile(r"\b\d-\d{4}-\d{5}-\d{2}-\d\b"), "[ID_CARD]"),
    (re.compile(r"\b\d{13}\b"), "[ID_CARD]"),
    (re.compile(r"[^\s@]+@([^\s@]+\.[^\s@]+)"), r"***@\1"),
]


def _build_handlers(
    log_path: Path, max_bytes: int, backup_count: int, console: bool
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    return handlers


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``coursereg`` logger. Safe to call more than once.

    Args:
        log_dir: Where the log file lives. Falls back to COURSEREG_LOG_DIR,
                 then to ``logs``.
        log_file: File name inside ``log_dir``.
        max_bytes: Rotation threshold per file.
        backup_count: Rotated files kept next to the live one.
        level: Level name. Falls back to COURSEREG_LOG_LEVEL, then INFO.
        console: Mirror records to stderr as well.

    Returns:
        The configured ``coursereg`` logger.
    """
    directory = Path(log_dir or os.environ.get("COURSEREG_LOG_DIR", DEFAULT_LOG_DIR))
    directory.mkdir(parents=True, exist_ok=True)
    level_name = (level or os.environ.get("COURSEREG_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(numeric_level)

    log_path = directory / log_file
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(log_path, max_bytes, backup_count, console):
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info("Logging to %s at %s", log_path, level_name)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the component logger ``coursereg.<name>``."""
    prefix = f"{ROOT_LOGGER}."
    return logging.getLogger(name if name.startswith(prefix) else prefix + name)


def sanitize_for_log(text: str) -> str:
    """Mask id-card numbers and e-mail local parts in ``text``."""
    for pattern, replacement in _PERSONAL_DATA:
        text = pattern.sub(replacement, text)
    return text
