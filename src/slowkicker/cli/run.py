"""CLI command: slowkicker run, the kicker daemon."""

from __future__ import annotations

import os
import signal
import sys

import click
from rich.console import Console

from slowkicker.cli import load_config
from slowkicker.lock import InstanceLock, LockError
from slowkicker.logs import attach_daemon_log
from slowkicker.session.context import KickerContext
from slowkicker.session.manager import SessionManager

console = Console(stderr=True)


@click.command()
@click.option("--foreground", "-f", is_flag=True, help="Do not fork into the background.")
@click.pass_context
def run(ctx: click.Context, foreground: bool) -> None:
    """Watch uploads and kick the slow ones until terminated."""
    config = load_config(ctx)

    lock = InstanceLock(config.lock_file)
    try:
        lock.acquire()
    except LockError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    try:
        attach_daemon_log(config.log_file)
    except OSError as e:
        console.print(f"[yellow]Daemon log unavailable:[/yellow] {e}")

    manager = SessionManager(KickerContext.from_config(config))

    if foreground:
        console.print(
            f"[bold]Slowkicker[/bold] watching [cyan]{config.glftpd_root}[/cyan] "
            f"with {len(manager.context.policy)} directory rule(s)"
        )
        console.print("  Press Ctrl+C to stop.\n")
    elif os.fork():
        # Parent: the child keeps the lock descriptor and runs the loop.
        os._exit(0)

    def _signal_handler(signum: int, frame: object) -> None:
        manager.stop()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        manager.monitor_loop()
    except KeyboardInterrupt:
        manager.stop()
    finally:
        lock.release()
