"""Resolution helpers for enriching online-user records.

Turns a session's reported directory and status line into the path of the
file being uploaded, and numeric group ids into glftpd group names.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path

from slowkicker.session.models import UPLOAD_VERB, SessionSnapshot

logger = logging.getLogger(__name__)

NO_GROUP = "NoGroup"


def strip_unprintable(text: str) -> str:
    """Drop trailing non-printable characters (CR, LF, NUL, undecodable bytes...)."""
    end = len(text)
    while end > 0 and not text[end - 1].isprintable():
        end -= 1
    return text[:end]


@dataclass
class PathResolver:
    """Derives the site path of the file an upload session is writing.

    The returned path is relative to the glftpd root (e.g.
    ``/site/iso/rel/file.rar``) and is what directory rules are matched
    against.
    """

    root: str

    def resolve(self, session: SessionSnapshot) -> str | None:
        real_path = self.root + session.current_dir
        try:
            st = os.stat(real_path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Unable to stat path: %s: %s", session.current_dir, e.strerror or e)
            return None

        if not stat.S_ISDIR(st.st_mode):
            return session.current_dir

        filename = session.status[len(UPLOAD_VERB) :]
        path = strip_unprintable(f"{session.current_dir}/{filename}")
        if not filename or path.endswith("/"):
            logger.error("Malformed status: %s", session.status)
            return None
        return path


@dataclass
class GroupResolver:
    """Maps numeric group ids to names using glftpd's ``etc/group`` file.

    Results are cached until :meth:`clear` is called; the poll loop clears
    the cache at the start of every pass so edits to the file are picked up.
    """

    group_file: Path
    _cache: dict[int, str] = field(default_factory=dict)

    def lookup(self, gid: int) -> str:
        if gid in self._cache:
            return self._cache[gid]

        name = self._read_group(gid)
        self._cache[gid] = name
        return name

    def clear(self) -> None:
        self._cache.clear()

    def _read_group(self, gid: int) -> str:
        try:
            text = self.group_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Unable to read %s: %s", self.group_file, e)
            return NO_GROUP
        return _parse_group_name(text, gid)


def _parse_group_name(text: str, gid: int) -> str:
    """Find the name of ``gid`` in ``name:password:gid:...`` lines."""
    for line in text.splitlines():
        fields = line.split(":")
        if len(fields) < 3 or not fields[0]:
            continue
        try:
            current_gid = int(fields[2])
        except ValueError:
            continue
        if current_gid == gid:
            return fields[0]
    return NO_GROUP
