"""Binary layout of glftpd's ``struct ONLINE`` records.

Fields, in order, with native alignment::

    char   tagline[64];
    char   username[24];
    char   status[256];
    short  ssl_flag;
    char   host[256];
    char   currentdir[256];
    long   groupid;
    time_t login_time;
    struct timeval tstart;
    struct timeval txfer;
    unsigned long long bytes_xfer;
    unsigned long long bytes_txfer;
    pid_t  procid;
"""

from __future__ import annotations

import struct
from collections.abc import Iterator

from slowkicker.session.models import SessionSnapshot

# Trailing "0l" pads the record to the alignment of long, like the C compiler.
ONLINE_STRUCT = struct.Struct("@64s24s256sh256s256sllllllQQi0l")
RECORD_SIZE = ONLINE_STRUCT.size


def _cstring(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="surrogateescape")


def decode_record(raw: bytes) -> SessionSnapshot:
    (
        _tagline,
        username,
        status,
        _ssl_flag,
        _host,
        currentdir,
        groupid,
        _login_time,
        tstart_sec,
        tstart_usec,
        _txfer_sec,
        _txfer_usec,
        bytes_xfer,
        _bytes_txfer,
        procid,
    ) = ONLINE_STRUCT.unpack(raw)
    return SessionSnapshot(
        username=_cstring(username),
        group_id=groupid,
        current_dir=_cstring(currentdir),
        status=_cstring(status),
        pid=procid,
        transfer_start=tstart_sec + tstart_usec / 1_000_000.0,
        bytes_transferred=bytes_xfer,
    )


def iter_records(buf: bytes) -> Iterator[SessionSnapshot]:
    """Decode every whole record in ``buf``; a trailing partial record is ignored."""
    count = len(buf) // RECORD_SIZE
    for i in range(count):
        offset = i * RECORD_SIZE
        yield decode_record(buf[offset : offset + RECORD_SIZE])
