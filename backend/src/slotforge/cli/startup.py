"""Startup helpers shared by CLI commands."""

from pathlib import Path

import click

from slotforge.config import SlotForgeConfig
from slotforge.metadata.loader import MetadataLoadError, register_structs
from slotforge.metadata.validator import KIND_SCHEMA, validate_yaml_file
from slotforge.validation import register_builtin_types


def check_schema(path: Path, kind: str) -> None:
    """Echo schema issues for a metadata file and exit 1 if there are any."""
    issues = validate_yaml_file(path, KIND_SCHEMA[kind])
    if not issues:
        return
    for issue in issues:
        click.echo(click.style(str(issue), fg="red"), err=True)
    click.echo(
        click.style(f"\n{len(issues)} schema error(s) found", fg="red", bold=True),
        err=True,
    )
    raise SystemExit(1)


def setup_types(config: SlotForgeConfig, structs_path: Path | None) -> list[str]:
    """Register built-in types and the declared structures.

    Returns:
        Names of the structures registered from the declarations file
    """
    register_builtin_types()

    path = structs_path or config.structs_path
    if path is None:
        return []
    if not path.exists():
        click.echo(f"Error: Struct declarations not found at {path}", err=True)
        raise SystemExit(1)

    check_schema(path, "structs")
    try:
        return register_structs(path)
    except MetadataLoadError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
