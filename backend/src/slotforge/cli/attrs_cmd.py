"""Slot attribute CLI commands: validate and encode."""

import json
from pathlib import Path

import click

from slotforge.cli.startup import check_schema, setup_types
from slotforge.config import SlotForgeConfig
from slotforge.metadata.loader import MetadataLoadError, load_attribute_file
from slotforge.validation import MalformedOptionsError, ValidationEngine, encode
from slotforge.validation.types import AttributeDefinition


def _load(path: Path) -> list[AttributeDefinition]:
    check_schema(path, "attributes")
    try:
        return load_attribute_file(path)
    except MetadataLoadError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


@click.group()
def attrs():
    """Slot attribute commands."""
    pass


@attrs.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--structs",
    "structs_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file declaring struct types (default: SLOTFORGE_STRUCTS_PATH).",
)
@click.option(
    "--strict-types",
    is_flag=True,
    default=False,
    help="Reject type tags that are not registered.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print results as JSON.")
@click.pass_obj
def validate(
    config: SlotForgeConfig,
    file: Path,
    structs_path: Path | None,
    strict_types: bool,
    as_json: bool,
):
    """Validate the slot attributes defined in FILE."""
    setup_types(config, structs_path)
    definitions = _load(file)

    engine = ValidationEngine(strict_types=strict_types or config.strict_types)
    results = engine.validate_many(definitions)
    invalid = [r for r in results if not r.valid]

    if as_json:
        payload = {
            "file": str(file),
            "valid": not invalid,
            "results": [
                {"name": d.name, **r.to_dict()} for d, r in zip(definitions, results)
            ],
        }
        click.echo(json.dumps(payload, indent=2))
        if invalid:
            raise SystemExit(1)
        return

    for definition, result in zip(definitions, results):
        label = definition.name or "<unnamed>"
        if result.valid:
            click.echo(click.style(f"  ✓ {label} ({definition.type_tag})", fg="green"))
            continue
        click.echo(click.style(f"  ✗ {label}", fg="red"))
        for error in result.errors:
            click.echo(f"      {error.field}: {error.message} [{error.code.value}]")

    if invalid:
        click.echo(
            click.style(
                f"\n{len(invalid)} of {len(results)} attribute(s) invalid",
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    click.echo(click.style(f"\nAll {len(results)} attribute(s) are valid.", fg="green", bold=True))


@attrs.command("encode")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--structs",
    "structs_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file declaring struct types (default: SLOTFORGE_STRUCTS_PATH).",
)
@click.pass_obj
def encode_cmd(config: SlotForgeConfig, file: Path, structs_path: Path | None):
    """Print the serialized options of each attribute in FILE."""
    setup_types(config, structs_path)
    for definition in _load(file):
        try:
            encoded = encode(definition.options)
        except (MalformedOptionsError, ValueError) as e:
            click.echo(click.style(f"Error: {definition.name}: {e}", fg="red"), err=True)
            raise SystemExit(1)
        click.echo(f"{definition.name}\t{encoded.decode('utf-8')}")
