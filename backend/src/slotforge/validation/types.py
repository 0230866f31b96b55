"""Core types for the SlotForge validation engine.

This module defines the records that flow through a validation call:
- AttributeDefinition: the slot attribute being validated
- ValidationError: a single field-scoped error
- ValidationResult: the verdict (accepted definition or ordered errors)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from slotforge.validation.codec import decode, dump_options


class ErrorCode(Enum):
    """Machine-readable error codes reported by validation rules."""

    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_NAME_FORMAT = "INVALID_NAME_FORMAT"
    UNKNOWN_TYPE = "UNKNOWN_TYPE"
    STRUCT_NOT_FOUND = "STRUCT_NOT_FOUND"
    NON_EMPTY_LIST_REQUIRED = "NON_EMPTY_LIST_REQUIRED"
    MUTUALLY_EXCLUSIVE_OPTIONS = "MUTUALLY_EXCLUSIVE_OPTIONS"
    VALUE_NOT_IN_ALLOWED_SET = "VALUE_NOT_IN_ALLOWED_SET"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    STRUCT_DEFAULT_MISMATCH = "STRUCT_DEFAULT_MISMATCH"
    MALFORMED_OPTIONS = "MALFORMED_OPTIONS"


@dataclass(frozen=True)
class ValidationError:
    """A single validation error.

    Attributes:
        message: Human-readable message
        code: Machine-readable error code
        field: Field this error relates to ("name", "struct_name", "default", ...)
    """

    message: str
    code: ErrorCode
    field: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code.value,
            "field": self.field,
        }


# Keys accepted from a raw submission. Anything else is dropped.
_SUBMISSION_KEYS = {
    "name": "name",
    "type": "type_tag",
    "type_tag": "type_tag",
    "struct_name": "struct_name",
    "opts": "options",
    "options": "options",
    "slot_id": "slot_id",
}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


@dataclass(frozen=True)
class AttributeDefinition:
    """Metadata describing one typed, constrained slot attribute.

    Attributes:
        name: Attribute name, unique within its slot (enforced elsewhere)
        type_tag: Declared value type ("string", "integer", ..., "struct")
        struct_name: Registered structure name, for type_tag == "struct"
        options: Raw or decoded options (required, default, values, examples)
        slot_id: Opaque reference to the owning slot; never interpreted here
    """

    name: str | None = None
    type_tag: str | None = None
    struct_name: str | None = None
    options: Any = None
    slot_id: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttributeDefinition":
        """Create an AttributeDefinition from a submitted dict.

        Only the known submission keys are picked up, and blank strings are
        treated as missing values.
        """
        kwargs: dict[str, Any] = {}
        for key, attr in _SUBMISSION_KEYS.items():
            if key in data and attr not in kwargs:
                kwargs[attr] = data[key]

        for attr in ("name", "type_tag", "struct_name"):
            if attr in kwargs:
                kwargs[attr] = _blank_to_none(kwargs[attr])

        return cls(**kwargs)


@dataclass
class ValidationResult:
    """Verdict of validating an attribute definition.

    Attributes:
        valid: True if no rule reported an error
        errors: Errors in rule order (empty when valid)
        definition: The accepted definition with decoded options, when valid
    """

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    definition: AttributeDefinition | None = None

    @classmethod
    def accepted(cls, definition: AttributeDefinition) -> "ValidationResult":
        return cls(valid=True, definition=definition)

    @classmethod
    def rejected(cls, errors: list[ValidationError]) -> "ValidationResult":
        return cls(valid=False, errors=list(errors))

    def errors_for(self, field_name: str) -> list[ValidationError]:
        """Errors reported against a single field."""
        return [e for e in self.errors if e.field == field_name]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.definition is not None:
            result["attribute"] = {
                "name": self.definition.name,
                "type": self.definition.type_tag,
                "struct_name": self.definition.struct_name,
                "opts": dump_options(decode(self.definition.options), default=repr),
            }
        return result
