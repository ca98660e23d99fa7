"""Logging setup shared by the CLI and the HTTP service."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Per-connection chatter we never want at INFO
QUIET_LOGGERS = ('aiohttp.access', 'aiohttp.client', 'aiohttp.internal', 'asyncio')


def _to_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(log_file: Optional[Path] = None, level: Union[int, str] = logging.INFO):
    """Send every module's log records to stdout and, for scans, a run log.

    `level` accepts a name from LOG_LEVEL ("debug", "INFO") or a logging
    constant; unknown names fall back to INFO.
    """
    level = _to_level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
