"""Load structure declarations and attribute definitions from YAML files."""

import copy
import dataclasses
import keyword
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from slotforge.validation.codec import MalformedOptionsError, decode_value
from slotforge.validation.structs import StructTypeResolver
from slotforge.validation.types import AttributeDefinition

logger = logging.getLogger(__name__)


class MetadataLoadError(Exception):
    """Raised when a metadata file cannot be read or has the wrong shape."""


@dataclass
class StructDeclaration:
    """A structure declared in YAML: a name and its field defaults."""

    name: str
    fields: dict[str, Any] = field(default_factory=dict)


def _read_yaml(path: Path, root_key: str) -> dict[str, Any]:
    try:
        with path.open() as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise MetadataLoadError(f"Cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MetadataLoadError(f"YAML parse error in {path}: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get(root_key), list):
        raise MetadataLoadError(f"{path} must contain a '{root_key}' list")
    return data


# =============================================================================
# Structures
# =============================================================================


def load_struct_declarations(path: Path) -> list[StructDeclaration]:
    """Read structure declarations from a YAML file.

    Expected shape:
        structs:
          - name: Shop.Address
            fields:
              street: ""
              city: null
    """
    data = _read_yaml(path, "structs")

    declarations = []
    for index, item in enumerate(data["structs"]):
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise MetadataLoadError(f"{path}: structs[{index}] needs a 'name'")
        fields = item.get("fields") or {}
        if not isinstance(fields, dict):
            raise MetadataLoadError(f"{path}: structs[{index}].fields must be a mapping")
        for field_name in fields:
            if not isinstance(field_name, str) or not field_name.isidentifier() or keyword.iskeyword(field_name):
                raise MetadataLoadError(
                    f"{path}: struct {item['name']} has an invalid field name {field_name!r}"
                )
        declarations.append(StructDeclaration(name=item["name"], fields=dict(fields)))
    return declarations


def build_struct_class(declaration: StructDeclaration) -> type:
    """Build a dataclass for a declared structure.

    Every field defaults to its declared value, so the class can be
    instantiated without arguments.
    """
    class_name = "".join(
        part[:1].upper() + part[1:]
        for part in declaration.name.replace("-", "_").split(".")
        if part
    )
    if not class_name.isidentifier():
        class_name = "DeclaredStruct"

    fields = [
        (
            name,
            Any,
            dataclasses.field(default_factory=lambda value=value: copy.deepcopy(value)),
        )
        for name, value in declaration.fields.items()
    ]
    return dataclasses.make_dataclass(class_name, fields, frozen=True)


def _already_declared(declaration: StructDeclaration) -> bool:
    """True if the same declaration was registered earlier in this process."""
    if not StructTypeResolver.is_registered(declaration.name):
        return False
    existing = StructTypeResolver.resolve(declaration.name)
    if existing.fields != tuple(declaration.fields):
        return False
    empty = existing.empty_instance()
    return all(getattr(empty, name) == value for name, value in declaration.fields.items())


def register_structs(path: Path) -> list[str]:
    """Load structure declarations and register them.

    Returns:
        Names of the registered structures, in file order
    """
    names = []
    for declaration in load_struct_declarations(path):
        if _already_declared(declaration):
            names.append(declaration.name)
            continue
        try:
            StructTypeResolver.register(declaration.name, build_struct_class(declaration))
        except (TypeError, ValueError) as exc:
            raise MetadataLoadError(f"{path}: {exc}") from exc
        names.append(declaration.name)
    logger.debug("Registered %d struct(s) from %s", len(names), path)
    return names


# =============================================================================
# Attribute definitions
# =============================================================================


def load_attribute_file(path: Path) -> list[AttributeDefinition]:
    """Read attribute definitions from a YAML file.

    Expected shape:
        slot: hero            # optional, default slot_id for every entry
        attributes:
          - name: title
            type: string
            opts:
              required: true

    Option values may use the tagged forms of the options codec, e.g.
    ``{"$atom": "primary"}``. A string ``opts`` is taken as the serialized
    form and decoded during validation.
    """
    data = _read_yaml(path, "attributes")
    slot_id = data.get("slot")

    definitions = []
    for index, item in enumerate(data["attributes"]):
        if not isinstance(item, dict):
            raise MetadataLoadError(f"{path}: attributes[{index}] must be a mapping")

        entry = dict(item)
        entry.setdefault("slot_id", slot_id)
        opts = entry.get("opts")
        if isinstance(opts, dict):
            try:
                entry["opts"] = {key: decode_value(value) for key, value in opts.items()}
            except MalformedOptionsError as exc:
                raise MetadataLoadError(f"{path}: attributes[{index}].opts: {exc}") from exc

        definitions.append(AttributeDefinition.from_dict(entry))
    return definitions
