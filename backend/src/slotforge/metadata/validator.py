"""
metadata/validator.py: JSON Schema checks for SlotForge YAML files.

Checks the shape of structure declaration and attribute definition files
before they are loaded. Semantic checks of each attribute are the job of the
validation engine; this only catches files the loaders cannot read.

Usage:
    from slotforge.metadata.validator import validate_yaml_file

    issues = validate_yaml_file(Path("attrs.yaml"), "attributes.schema.json")
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

# Map file kind → schema filename
KIND_SCHEMA: dict[str, str] = {
    "structs": "structs.schema.json",
    "attributes": "attributes.schema.json",
}


@dataclass
class ValidationIssue:
    """A single schema finding for a metadata YAML file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "attributes[0]/opts"
    severity: str = "error"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def load_registry() -> Registry:
    """Build a jsonschema Registry containing all SlotForge schemas."""
    resources = []
    for name in ["_defs.schema.json", *KIND_SCHEMA.values()]:
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_document(
    doc: Any,
    schema_name: str,
    *,
    file: Path,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """Validate an already parsed document against the named schema."""
    if registry is None:
        registry = load_registry()

    schema = _load_schema(schema_name)
    validator = Draft202012Validator(schema, registry=registry)

    return [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=lambda e: list(map(str, e.path)))
    ]


def validate_yaml_file(
    yaml_path: Path,
    schema_name: str,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single YAML file against the named schema.

    Args:
        yaml_path:   Path to the YAML file to validate.
        schema_name: Filename of the schema (e.g. ``"attributes.schema.json"``).
        registry:    Pre-built schema registry.  Built automatically if omitted.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        return [ValidationIssue(file=yaml_path, message=f"Cannot read file: {exc}")]
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    issues = validate_document(raw, schema_name, file=yaml_path, registry=registry)
    if issues:
        logger.warning("%s failed schema validation with %d issue(s)", yaml_path, len(issues))
    return issues
