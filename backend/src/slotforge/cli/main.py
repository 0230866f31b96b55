"""SlotForge CLI entry point."""

import logging

import click

from slotforge.config import SlotForgeConfig

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: SLOTFORGE_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """SlotForge: slot attribute validation CLI."""
    config = SlotForgeConfig.from_env()
    if log_level:
        config.log_level = log_level.upper()
    if config.log_level not in LOG_LEVELS:
        config.log_level = "WARNING"

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


# Register subcommand groups
from slotforge.cli.attrs_cmd import attrs  # noqa: E402
from slotforge.cli.types_cmd import types  # noqa: E402

cli.add_command(attrs)
cli.add_command(types)
