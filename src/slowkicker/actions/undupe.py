"""Undupe action: removes a deleted upload from glftpd's dupe database."""

from __future__ import annotations

import logging
import posixpath
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class UndupeCommand:
    """Runs ``undupe -u <user> -f <file>`` and ignores its result.

    The call is bounded by ``timeout`` so a hung tool cannot stall the
    poll loop indefinitely.
    """

    def __init__(self, binary: Path, timeout: float = 10.0) -> None:
        self._binary = binary
        self._timeout = timeout

    def execute(self, username: str, path: str) -> bool:
        if "/" not in path:
            logger.error("Undupe failed, malformed path: %s: %s", username, path)
            return False
        filename = posixpath.basename(path)

        try:
            subprocess.run(
                [str(self._binary), "-u", username, "-f", filename],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self._timeout,
            )
            return True
        except subprocess.TimeoutExpired:
            logger.warning(
                "Undupe timed out after %.0fs: %s: %s", self._timeout, username, filename
            )
            return False
        except OSError as e:
            logger.warning("Undupe failed: %s: %s: %s", username, filename, e)
            return False
