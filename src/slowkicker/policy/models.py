"""Policy data models: immutable dataclasses used across the entire codebase."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class KickReason(enum.Enum):
    """Why an upload was kicked. Each reason has its own audit log tag."""

    ZERO_BYTE = "zero byte"
    STALLED = "stalling upload"
    SLOW = "slow uploading"

    @property
    def tag(self) -> str:
        return _TAGS[self]


_TAGS = {
    KickReason.ZERO_BYTE: "ZEROBYTE",
    KickReason.STALLED: "STALLED",
    KickReason.SLOW: "SLOW",
}


@dataclass(frozen=True)
class DirectoryRule:
    """Speed policy for uploads whose path matches ``mask``."""

    mask: str
    min_speed: float
    min_duration: int
    max_kicks: int


@dataclass(frozen=True)
class KickOutcome:
    """Result of evaluating one upload against the directory policies."""

    should_kick: bool
    speed: float = 0.0
    duration: float = 0.0
    rule: DirectoryRule | None = None


@dataclass(frozen=True)
class ViolationRecord:
    """How many times a user has been kicked for uploading a given path."""

    username: str
    path: str
    kick_count: int


DEFAULT_DIRECTORIES: tuple[DirectoryRule, ...] = (
    DirectoryRule(mask="/site/iso/*", min_speed=75, min_duration=15, max_kicks=3),
    DirectoryRule(mask="/site/mp3/*", min_speed=75, min_duration=15, max_kicks=3),
    DirectoryRule(mask="/site/0day/*", min_speed=75, min_duration=15, max_kicks=3),
)
