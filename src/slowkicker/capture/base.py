"""SessionSource protocol: all online-users providers must satisfy this."""

from __future__ import annotations

import os
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

import psutil

from slowkicker.session.models import SessionSnapshot


class SessionTableError(Exception):
    """The online users table exists but could not be read."""


@runtime_checkable
class SessionSource(Protocol):
    """Protocol for providers of the server's current online users."""

    def sample(self) -> AbstractContextManager[list[SessionSnapshot]]:
        """Attach to the users table for the duration of one pass.

        Yields the snapshots in table order and releases the table on exit.
        Raises :class:`SessionTableError` if the table cannot be read.
        """
        ...


def is_uploading(session: SessionSnapshot) -> bool:
    """Whether the session is storing a file through a process we can signal.

    psutil rules out stale pids and thread ids. A signal-0 kill then
    rules out processes that exist but refuse our signals (EPERM), since a
    kick could never land on them. Both checks can race with the process
    exiting, so callers must tolerate it being gone afterwards.
    """
    if session.pid == 0 or not session.is_storing:
        return False
    if not psutil.pid_exists(session.pid):
        return False
    try:
        os.kill(session.pid, 0)
    except OSError:
        return False
    return True
