"""Policy evaluator: matches upload paths and decides whether to kick."""

from __future__ import annotations

import fnmatch
import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from slowkicker.policy.history import ViolationHistory
from slowkicker.policy.models import DirectoryRule, KickOutcome
from slowkicker.session.models import SessionSnapshot


@dataclass(frozen=True)
class _CompiledRule:
    """A rule with its glob pre-compiled to a regex."""

    rule: DirectoryRule
    regex: re.Pattern[str]


class DirectoryPolicyTable:
    """Ordered directory rules. First-match-wins."""

    def __init__(self, rules: Iterable[DirectoryRule]) -> None:
        self._compiled = tuple(
            _CompiledRule(rule=rule, regex=re.compile(fnmatch.translate(rule.mask)))
            for rule in rules
        )

    @property
    def rules(self) -> tuple[DirectoryRule, ...]:
        return tuple(cr.rule for cr in self._compiled)

    def match(self, path: str) -> DirectoryRule | None:
        """Return the first rule whose mask matches ``path``, if any.

        Matching is case-sensitive and ``*`` also matches ``/``.
        """
        for cr in self._compiled:
            if cr.regex.match(path):
                return cr.rule
        return None

    def __len__(self) -> int:
        return len(self._compiled)


class SpeedEvaluator:
    """Computes an upload's average speed and checks it against its rule."""

    def __init__(
        self,
        policy: DirectoryPolicyTable,
        history: ViolationHistory,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._policy = policy
        self._history = history
        self._clock = clock

    def evaluate(self, session: SessionSnapshot, path: str) -> KickOutcome:
        rule = self._policy.match(path)
        if rule is None:
            return KickOutcome(should_kick=False)

        duration = self._clock() - session.transfer_start
        speed = average_speed(session.bytes_transferred, duration)
        outcome = KickOutcome(
            should_kick=False, speed=speed, duration=duration, rule=rule
        )

        if duration < rule.min_duration or speed >= rule.min_speed:
            return outcome

        if self._history.count(session.username, path) >= rule.max_kicks:
            return outcome

        return KickOutcome(should_kick=True, speed=speed, duration=duration, rule=rule)


def average_speed(num_bytes: int, duration: float) -> float:
    """Average speed in kB/s.

    A zero duration yields the raw byte count (in kB) rather than a rate.
    """
    if duration == 0:
        return num_bytes / 1024.0
    return num_bytes / duration / 1024.0
