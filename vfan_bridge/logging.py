"""Logging setup for the bridge daemon.

Console output goes to stderr so systemd's journal picks it up; a log
file can be added through ``[logging] path``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Held at WARNING unless verbose_libraries is set.
QUIET_LOGGERS = ("aiohttp.access", "aiohttp.server", "asyncio", "serial")


def _resolve_level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, verbose_libraries: bool = False
) -> None:
    """Replace the root handlers with a console handler and optional file handler.

    Unknown level names fall back to INFO.
    """

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)

    threshold = logging.NOTSET if verbose_libraries else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(threshold)
