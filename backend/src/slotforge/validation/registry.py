"""Type registry for SlotForge.

Maps attribute type tags to value predicates, and resolves "struct" types
through the StructTypeResolver.
"""

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from slotforge.validation.structs import (
    StructDescriptor,
    StructNotFoundError,
    StructTypeResolver,
)

logger = logging.getLogger(__name__)

STRUCT_TAG = "struct"

TypePredicate = Callable[[Any], bool]


class UnknownTypeError(LookupError):
    """Raised when a type tag is not registered."""

    def __init__(self, tag: Any):
        self.tag = tag
        super().__init__(f"unknown type '{tag}'")


@dataclass(frozen=True)
class Atom:
    """A symbolic constant, the value space of the "atom" type."""

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True)
class TypeDescriptor:
    """A registered type tag and its value predicate."""

    tag: str
    predicate: TypePredicate


class TypeRegistry:
    """Registry of attribute type tags.

    Primitive tags are registered at startup via register_builtin_types().
    The "struct" tag is always known; its predicate depends on the structure
    named by the attribute, so it is resolved per call.

    Example:
        register_builtin_types()
        TypeRegistry.matches("integer", 3)          # True
        TypeRegistry.matches("struct", addr, "Shop.Address")
    """

    _types: dict[str, TypeDescriptor] = {}

    @classmethod
    def register(cls, tag: str, predicate: TypePredicate) -> None:
        """Register a type tag.

        Idempotent - re-registering the same tag is a no-op.
        """
        if tag in cls._types or tag == STRUCT_TAG:
            return
        cls._types[tag] = TypeDescriptor(tag=tag, predicate=predicate)
        logger.debug("Registered type tag %s", tag)

    @classmethod
    def resolve_type(cls, tag: str) -> TypeDescriptor:
        """Get the descriptor for a type tag.

        Raises:
            UnknownTypeError: If the tag is neither registered nor "struct"
        """
        if tag == STRUCT_TAG:
            return TypeDescriptor(tag=STRUCT_TAG, predicate=lambda value: False)
        try:
            return cls._types[tag]
        except (KeyError, TypeError):
            raise UnknownTypeError(tag) from None

    @classmethod
    def matches(cls, tag: str, value: Any, struct_name: str | None = None) -> bool:
        """Check whether a value belongs to the type named by tag.

        None matches every type. For "struct", the value must be an instance
        of the structure registered under struct_name.
        """
        if value is None:
            return True

        if tag == STRUCT_TAG:
            if struct_name is None:
                return False
            try:
                descriptor = cls.resolve_struct(struct_name)
            except StructNotFoundError:
                return False
            return isinstance(value, descriptor.cls)

        try:
            descriptor = cls.resolve_type(tag)
        except UnknownTypeError:
            logger.debug("No predicate for type tag %r", tag)
            return False
        return descriptor.predicate(value)

    @classmethod
    def resolve_struct(cls, name: str) -> StructDescriptor:
        """Resolve a structure name (registry lookup only)."""
        return StructTypeResolver.resolve(name)

    @classmethod
    def empty_instance(cls, descriptor: StructDescriptor) -> Any:
        """Zero-value instance of a structure, used for default comparisons."""
        return descriptor.empty_instance()

    @classmethod
    def is_registered(cls, tag: str) -> bool:
        if not isinstance(tag, str):
            return False
        return tag == STRUCT_TAG or tag in cls._types

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(set(cls._types.keys()) | {STRUCT_TAG})

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._types.clear()


# =============================================================================
# Built-in predicates
# =============================================================================


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_float(value: Any) -> bool:
    return isinstance(value, float)


def _is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def _is_atom(value: Any) -> bool:
    return isinstance(value, (Atom, enum.Enum))


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_map(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_any(value: Any) -> bool:
    return True


BUILTIN_TYPES: dict[str, TypePredicate] = {
    "any": _is_any,
    "string": _is_string,
    "atom": _is_atom,
    "boolean": _is_boolean,
    "integer": _is_integer,
    "float": _is_float,
    "list": _is_list,
    "map": _is_map,
    "global": _is_map,
}


def register_builtin_types() -> None:
    """Register all primitive type tags."""
    for tag, predicate in BUILTIN_TYPES.items():
        TypeRegistry.register(tag, predicate)
