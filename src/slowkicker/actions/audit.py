"""Audit action: records kicks in glftpd's own log."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from slowkicker.policy.models import KickReason

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%a %b %e %H:%M:%S %Y"


def format_timestamp(now: float | None = None) -> str:
    return time.strftime(TIMESTAMP_FORMAT, time.localtime(now))


def format_audit_line(
    reason: KickReason,
    username: str,
    path: str,
    speed: float,
    group: str | None = None,
    categorized: bool = True,
) -> str:
    """Build a glftpd.log entry (without timestamp) for a kick.

    Uncategorized kicks are all logged as SLOW. Only SLOW entries carry the
    speed, and the group field is left out when no group is given.
    """
    if not categorized:
        reason = KickReason.SLOW
    fields = [path, username]
    if group is not None:
        fields.append(group)
    if reason is KickReason.SLOW:
        fields.append(f"{speed:.0f}")
    quoted = " ".join(f'"{field}"' for field in fields)
    return f"{reason.tag}: {quoted}"


class AuditLog:
    """Appends kick records to glftpd.log for site bots to announce."""

    def __init__(self, path: Path, categorized: bool = True) -> None:
        self._path = path
        self._categorized = categorized

    def write(
        self,
        reason: KickReason,
        username: str,
        path: str,
        speed: float,
        group: str | None = None,
    ) -> bool:
        line = format_audit_line(
            reason, username, path, speed, group, categorized=self._categorized
        )
        try:
            with self._path.open("a", encoding="utf-8", errors="surrogateescape") as f:
                f.write(f"{format_timestamp()} {line}\n")
        except OSError as e:
            logger.debug("Unable to append to %s: %s", self._path, e)
            return False
        return True
