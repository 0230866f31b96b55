"""SlotForge attribute validation.

This module validates slot attribute definitions:
- TypeRegistry / StructTypeResolver: type tags and registered structures
- OptionsCodec (decode/encode): the attribute options bag
- Rules: the ordered, optionally gated validation rules
- ValidationEngine: runs the rules and returns a verdict

Usage:
    from slotforge.validation import (
        AttributeDefinition,
        ValidationEngine,
        register_builtin_types,
    )

    # At application startup
    register_builtin_types()

    result = ValidationEngine().validate(
        AttributeDefinition(name="title", type_tag="string", options={"required": True})
    )
"""

from slotforge.validation.codec import (
    MISSING,
    AttributeOptions,
    MalformedOptionsError,
    decode,
    encode,
)
from slotforge.validation.engine import ValidationEngine
from slotforge.validation.registry import (
    Atom,
    TypeDescriptor,
    TypeRegistry,
    UnknownTypeError,
    register_builtin_types,
)
from slotforge.validation.rules import DEFAULT_RULES, Rule, RuleContext, build_rule_set
from slotforge.validation.service import AttributeStore, SlotAttributeService
from slotforge.validation.structs import (
    StructDescriptor,
    StructNotFoundError,
    StructTypeResolver,
    struct_type,
)
from slotforge.validation.types import (
    AttributeDefinition,
    ErrorCode,
    ValidationError,
    ValidationResult,
)

__all__ = [
    # Types
    "AttributeDefinition",
    "ErrorCode",
    "ValidationError",
    "ValidationResult",
    # Registries
    "Atom",
    "StructDescriptor",
    "StructNotFoundError",
    "StructTypeResolver",
    "TypeDescriptor",
    "TypeRegistry",
    "UnknownTypeError",
    "struct_type",
    # Codec
    "MISSING",
    "AttributeOptions",
    "MalformedOptionsError",
    "decode",
    "encode",
    # Rules and engine
    "DEFAULT_RULES",
    "Rule",
    "RuleContext",
    "ValidationEngine",
    "build_rule_set",
    # Service
    "AttributeStore",
    "SlotAttributeService",
    # Setup
    "register_builtin_types",
]
