"""CLI command: slowkicker rules, show the directory policy table."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from slowkicker.cli import load_config

console = Console()


@click.command()
@click.pass_context
def rules(ctx: click.Context) -> None:
    """List directory rules in match order."""
    config = load_config(ctx)

    table = Table(title="Directory rules (first match wins)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Mask", style="cyan")
    table.add_column("Min speed (kB/s)", justify="right")
    table.add_column("Min duration (s)", justify="right")
    table.add_column("Max kicks", justify="right")

    for i, rule in enumerate(config.directories, start=1):
        table.add_row(
            str(i),
            rule.mask,
            f"{rule.min_speed:g}",
            str(rule.min_duration),
            str(rule.max_kicks),
        )

    console.print(table)
