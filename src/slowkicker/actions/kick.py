"""Kick action: terminate a slow upload and remove its partial file."""

from __future__ import annotations

import logging
import os
import signal

from slowkicker.actions.audit import AuditLog
from slowkicker.actions.undupe import UndupeCommand
from slowkicker.policy.models import KickReason
from slowkicker.resolve import GroupResolver
from slowkicker.session.models import Kick, SessionSnapshot

logger = logging.getLogger(__name__)


def classify_kick(size: int, speed: float) -> KickReason:
    if size == 0:
        return KickReason.ZERO_BYTE
    if speed == 0:
        return KickReason.STALLED
    return KickReason.SLOW


def _owner_matches(owner_uid: int | None, pid: int) -> bool:
    # TODO: owner uid and pid are unrelated ids; confirm the intended
    # ownership check with the site owner before changing it.
    return owner_uid == pid


class KickAction:
    """Terminates an upload's process, deletes its file and reports the kick.

    Steps run in order and any failure stops the rest:
    SIGTERM, stat, unlink, undupe (best effort), daemon log + glftpd.log.
    """

    def __init__(
        self,
        root: str,
        undupe: UndupeCommand,
        audit: AuditLog,
        groups: GroupResolver | None = None,
    ) -> None:
        self._root = root
        self._undupe = undupe
        self._audit = audit
        self._groups = groups

    def execute(self, session: SessionSnapshot, path: str, speed: float) -> Kick | None:
        """Kick the session. Returns the kick on success, None otherwise."""
        pid = session.pid
        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            return None
        except OSError as e:
            logger.error("Unable to kill process: %d: %s", pid, e.strerror or e)
            return None

        real_path = self._root + path
        try:
            size = os.stat(real_path).st_size
        except FileNotFoundError:
            if not _owner_matches(None, pid):
                return None
            size = 0
        except OSError as e:
            logger.error("Unable to stat path: %s: %s", real_path, e.strerror or e)
            return None

        try:
            os.unlink(real_path)
        except OSError as e:
            logger.error("Unable to delete file: %s: %s", real_path, e.strerror or e)
            return None

        self._undupe.execute(session.username, path)

        reason = classify_kick(size, speed)
        group = self._groups.lookup(session.group_id) if self._groups else None

        logger.info(
            "Kicked user for %s: %s: %.0fkB/s: %s",
            reason.value,
            session.username,
            speed,
            path,
        )
        self._audit.write(reason, session.username, path, speed, group)

        return Kick(
            username=session.username,
            group=group or "",
            path=path,
            speed=speed,
            reason=reason,
        )
