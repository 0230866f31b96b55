"""Type registry CLI commands."""

from pathlib import Path

import click

from slotforge.cli.startup import setup_types
from slotforge.config import SlotForgeConfig
from slotforge.validation import StructTypeResolver, TypeRegistry


@click.group()
def types():
    """Type registry commands."""
    pass


@types.command("list")
@click.option(
    "--structs",
    "structs_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file declaring struct types (default: SLOTFORGE_STRUCTS_PATH).",
)
@click.pass_obj
def list_cmd(config: SlotForgeConfig, structs_path: Path | None):
    """List registered type tags and structures."""
    setup_types(config, structs_path)

    click.echo("Type tags:")
    for tag in TypeRegistry.list_registered():
        click.echo(f"  {tag}")

    structs = StructTypeResolver.list_registered()
    click.echo(f"\nStructs ({len(structs)}):")
    for name in structs:
        descriptor = StructTypeResolver.resolve(name)
        click.echo(f"  {name} ({', '.join(descriptor.fields) or 'no fields'})")
