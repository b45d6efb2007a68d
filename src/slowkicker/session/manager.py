"""Session manager: orchestrates sampling, evaluation, and kicks."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from slowkicker.capture.base import SessionTableError, is_uploading
from slowkicker.session.context import KickerContext
from slowkicker.session.models import Kick, PassReport, SessionSnapshot

logger = logging.getLogger(__name__)


class SessionManager:
    """Runs the sample→evaluate→kick pass once per interval."""

    def __init__(
        self,
        context: KickerContext,
        dry_run: bool = False,
        on_kick: Callable[[Kick], None] | None = None,
    ) -> None:
        self._ctx = context
        self._dry_run = dry_run
        self._on_kick = on_kick
        self._stop_event = threading.Event()
        self.passes = 0

    @property
    def context(self) -> KickerContext:
        return self._ctx

    def monitor_loop(self) -> None:
        """Blocking poll loop. Runs until stop() is called."""
        self._stop_event.clear()
        logger.info(
            "Watching uploads with %d directory rule(s), every %.1fs",
            len(self._ctx.policy),
            self._ctx.config.interval,
        )

        while not self._stop_event.is_set():
            self.run_pass()
            self._stop_event.wait(timeout=self._ctx.config.interval)

    def stop(self) -> None:
        """Signal the monitor loop to stop."""
        self._stop_event.set()

    def run_pass(self) -> PassReport:
        """Sample the online users once and kick every offending upload."""
        self.passes += 1
        report = PassReport()
        if self._ctx.groups is not None:
            self._ctx.groups.clear()

        try:
            with self._ctx.source.sample() as sessions:
                report.sessions = len(sessions)
                for session in sessions:
                    if not is_uploading(session):
                        continue
                    report.uploads += 1
                    kick = self._check_session(session)
                    if kick is not None:
                        report.kicks.append(kick)
        except SessionTableError:
            report.failed = True

        return report

    def _check_session(self, session: SessionSnapshot) -> Kick | None:
        path = self._ctx.paths.resolve(session)
        if path is None:
            return None

        outcome = self._ctx.evaluator.evaluate(session, path)
        if not outcome.should_kick:
            return None

        if self._dry_run:
            logger.info(
                "Would kick %s: %.0fkB/s: %s", session.username, outcome.speed, path
            )
            return None

        kick = self._ctx.kicker.execute(session, path, outcome.speed)
        if kick is None:
            return None

        self._ctx.history.increment(session.username, path)
        if self._on_kick:
            self._on_kick(kick)
        return kick
