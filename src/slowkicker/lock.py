"""Single-instance lock held for the daemon's whole lifetime."""

from __future__ import annotations

import errno
import fcntl
import os
from pathlib import Path


class LockError(Exception):
    """Another instance holds the lock, or the lock file is unusable."""


class AlreadyRunningError(LockError):
    pass


class InstanceLock:
    """Exclusive, non-blocking ``flock`` on a lock file.

    The descriptor is left open after :meth:`acquire`; forked children
    inherit it, so the lock lives as long as the daemon does.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._fd: int | None = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_WRONLY, 0o600)
        except OSError as e:
            raise LockError(f"Unable to create/open lock file: {e.strerror}") from e

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            os.close(fd)
            if e.errno in (errno.EWOULDBLOCK, errno.EAGAIN):
                raise AlreadyRunningError("Slowkicker is already running.") from e
            raise LockError(f"Unable to acquire exclusive lock: {e.strerror}") from e

        self._fd = fd

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> InstanceLock:
        self.acquire()
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()
