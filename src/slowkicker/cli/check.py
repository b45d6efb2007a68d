"""CLI command: slowkicker check, run a single pass and report."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from slowkicker.cli import load_config
from slowkicker.lock import InstanceLock, LockError
from slowkicker.logs import DAEMON_LOGGER, attach_daemon_log
from slowkicker.session.context import KickerContext
from slowkicker.session.manager import SessionManager
from slowkicker.session.models import PassReport

console = Console(stderr=True)


@click.command()
@click.option("--dry-run", "-n", is_flag=True, help="Evaluate uploads without kicking.")
@click.pass_context
def check(ctx: click.Context, dry_run: bool) -> None:
    """Sample the online users once and kick slow uploads."""
    config = load_config(ctx)
    manager = SessionManager(KickerContext.from_config(config), dry_run=dry_run)

    if dry_run:
        report = manager.run_pass()
    else:
        report = _kick_once(manager)
    _print_report(report, dry_run)
    if report.failed:
        sys.exit(1)


def _print_report(report: PassReport, dry_run: bool) -> None:
    if report.failed:
        console.print("[red]Unable to read the online users table.[/red]")
        return

    mode = " (dry run)" if dry_run else ""
    console.print(f"[bold]Pass Summary[/bold]{mode}")
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Sessions", str(report.sessions))
    table.add_row("Uploads", str(report.uploads))
    table.add_row("Kicks", str(len(report.kicks)))
    console.print(table)

    for kick in report.kicks:
        console.print(
            f"  [red]KICKED[/red] {kick.username} ({kick.reason.value}) "
            f"{kick.speed:.0f}kB/s {kick.path}"
        )


def _kick_once(manager: SessionManager) -> PassReport:
    # Holds the daemon lock for the pass and logs kicks the way the daemon does.
    config = manager.context.config
    lock = InstanceLock(config.lock_file)
    try:
        lock.acquire()
    except LockError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    handler = None
    try:
        try:
            handler = attach_daemon_log(config.log_file)
        except OSError as e:
            console.print(f"[yellow]Daemon log unavailable:[/yellow] {e}")
        return manager.run_pass()
    finally:
        if handler is not None:
            logging.getLogger(DAEMON_LOGGER).removeHandler(handler)
            handler.close()
        lock.release()
