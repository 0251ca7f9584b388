"""Root logger setup for Wordplay Server.

main.py calls setup_logging() once with LOG_LEVEL / LOG_FILE from config.py.
Repeat calls reuse the server's own handlers, so tests and reloads never
stack duplicate output.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s | %(message)s"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.strip().upper(), logging.INFO)


def _handler(root: logging.Logger, name: str, factory) -> logging.Handler:
    for handler in root.handlers:
        if handler.name == name:
            return handler
    handler = factory()
    handler.name = name
    root.addHandler(handler)
    return handler


def setup_logging(level: str | int = "INFO", log_file: str | None = None) -> logging.Logger:
    """Send server logs to stderr, and to a rotating file when log_file is set.

    Args:
        level: Level name or number; unknown names fall back to INFO.
        log_file: Optional path; parent directories are created.

    Returns:
        The root logger.
    """
    root = logging.getLogger()
    root.setLevel(_level(level))
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [_handler(root, "wordplay_console", logging.StreamHandler)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_handler(
            root,
            "wordplay_file",
            lambda: RotatingFileHandler(
                path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
            ),
        ))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.getLogger(__name__).debug("Logging ready | level=%s file=%s", level, log_file)
    return root
