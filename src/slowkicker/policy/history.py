"""Bounded in-memory record of how often each user/path has been kicked."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterator

from slowkicker.policy.models import ViolationRecord

DEFAULT_CAPACITY = 1000


class ViolationHistory:
    """Kick counts keyed by ``(username, path)``.

    Holds at most ``capacity`` keys. Adding a key beyond that evicts the
    oldest-inserted key; incrementing an existing key does not refresh its
    position. Nothing is persisted.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._counts: OrderedDict[tuple[str, str], int] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def count(self, username: str, path: str) -> int:
        return self._counts.get((username, path), 0)

    def increment(self, username: str, path: str) -> int:
        """Record one more successful kick and return the new count."""
        key = (username, path)
        if key in self._counts:
            self._counts[key] += 1
            return self._counts[key]

        if len(self._counts) >= self._capacity:
            self._counts.popitem(last=False)
        self._counts[key] = 1
        return 1

    def records(self) -> Iterator[ViolationRecord]:
        """Yield records oldest first."""
        for (username, path), kicks in self._counts.items():
            yield ViolationRecord(username=username, path=path, kick_count=kicks)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: object) -> bool:
        return key in self._counts
