"""Session data models: snapshots of online users and per-pass reports."""

from __future__ import annotations

from dataclasses import dataclass, field

from slowkicker.policy.models import KickReason

UPLOAD_VERB = "STOR "


@dataclass(frozen=True)
class SessionSnapshot:
    """One record of the server's online users table, copied out of shared memory."""

    username: str
    group_id: int
    current_dir: str
    status: str
    pid: int
    transfer_start: float
    bytes_transferred: int

    @property
    def is_storing(self) -> bool:
        """Whether the status line denotes an inbound upload."""
        return self.status[: len(UPLOAD_VERB)].upper() == UPLOAD_VERB


@dataclass(frozen=True)
class Kick:
    """A completed kick, as reported back to the poll loop."""

    username: str
    group: str
    path: str
    speed: float
    reason: KickReason


@dataclass
class PassReport:
    """What happened during a single sampling pass."""

    sessions: int = 0
    uploads: int = 0
    kicks: list[Kick] = field(default_factory=list)
    failed: bool = False
