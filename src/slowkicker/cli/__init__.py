"""CLI entry point: Click group with global options."""

from __future__ import annotations

import click

from slowkicker import __version__
from slowkicker.config import SlowKickerConfig
from slowkicker.logs import setup_console


@click.group()
@click.version_option(version=__version__, prog_name="slowkicker")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Slowkicker: kicks slow uploads off a glftpd server."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    setup_console(verbose)


def load_config(ctx: click.Context) -> SlowKickerConfig:
    try:
        return SlowKickerConfig.load(ctx.obj.get("config_path"))
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Invalid config: {e}") from e


def _register_commands() -> None:
    from slowkicker.cli.check import check  # noqa: F811
    from slowkicker.cli.rules import rules  # noqa: F811
    from slowkicker.cli.run import run  # noqa: F811

    main.add_command(run)
    main.add_command(check)
    main.add_command(rules)


_register_commands()
