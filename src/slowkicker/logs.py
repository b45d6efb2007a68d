"""Logging setup for the console and the daemon's own log file."""

from __future__ import annotations

import logging
from pathlib import Path

from slowkicker.actions.audit import TIMESTAMP_FORMAT

DAEMON_LOGGER = "slowkicker"


def setup_console(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def attach_daemon_log(path: Path, level: int = logging.INFO) -> logging.Handler:
    """Send ``slowkicker.*`` records to ``path`` as ``<timestamp> <message>`` lines."""
    handler = logging.FileHandler(path, encoding="utf-8", errors="surrogateescape")
    handler.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt=TIMESTAMP_FORMAT))
    handler.setLevel(level)

    logger = logging.getLogger(DAEMON_LOGGER)
    logger.addHandler(handler)
    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)
    return handler
