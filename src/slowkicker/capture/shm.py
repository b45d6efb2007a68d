"""Online users backend reading glftpd's SysV shared memory segment."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import sysv_ipc

from slowkicker.capture.base import SessionTableError
from slowkicker.capture.layout import iter_records
from slowkicker.session.models import SessionSnapshot

logger = logging.getLogger(__name__)


def signed_key(key: int) -> int:
    """Convert an unsigned 32-bit IPC key such as 0xDEADBABE to a C ``key_t``."""
    key &= 0xFFFFFFFF
    return key - (1 << 32) if key & 0x80000000 else key


@dataclass
class SharedMemorySessions:
    """Reads the online users table from the segment at ``ipc_key``.

    The segment is attached and detached on every :meth:`sample`, so the
    server may restart or resize it between passes.
    """

    ipc_key: int

    @contextmanager
    def sample(self) -> Iterator[list[SessionSnapshot]]:
        try:
            memory = sysv_ipc.SharedMemory(signed_key(self.ipc_key))
        except sysv_ipc.ExistentialError:
            # glftpd has not created the table yet; nobody is online.
            memory = None
        except sysv_ipc.Error as e:
            logger.error("Unable to open online users: %s", e)
            raise SessionTableError(str(e)) from e

        if memory is None:
            yield []
            return

        try:
            try:
                buf = memory.read()
            except sysv_ipc.Error as e:
                logger.error("Unable to open online users: %s", e)
                raise SessionTableError(str(e)) from e
            yield list(iter_records(buf))
        finally:
            _detach(memory)


def _detach(memory: sysv_ipc.SharedMemory) -> None:
    try:
        memory.detach()
    except sysv_ipc.Error as e:
        logger.warning("Unable to detach online users: %s", e)
