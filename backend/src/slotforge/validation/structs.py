"""Structure type registry for SlotForge.

Attributes with type "struct" reference a structure by name. Structures are
plain dataclasses that the host application registers at startup; resolving
a name is a dictionary lookup and never evaluates code.
"""

import copy
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


class StructNotFoundError(LookupError):
    """Raised when a structure name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"the struct {name} is undefined")


@dataclass(frozen=True)
class StructDescriptor:
    """A registered structure type.

    Attributes:
        name: Registered name (e.g., "Shop.Address")
        cls: The dataclass implementing the structure
        fields: Field names in declaration order
    """

    name: str
    cls: type
    fields: tuple[str, ...]
    _empty: Any = dataclasses.field(default=None, repr=False, compare=False)

    def empty_instance(self) -> Any:
        """Return a fresh copy of the zero-value instance."""
        return copy.deepcopy(self._empty)


class StructTypeResolver:
    """Registry of structures eligible for "struct" typed attributes.

    Structures must be explicitly registered before they can be referenced.
    Registration happens once at application startup; afterwards the
    registry is only read.

    Example:
        @struct_type("Shop.Address")
        @dataclass
        class Address:
            street: str = ""
            city: str | None = None

        descriptor = StructTypeResolver.resolve("Shop.Address")
    """

    _structs: dict[str, StructDescriptor] = {}

    @classmethod
    def register(cls, name: str, struct_class: type) -> StructDescriptor:
        """Register a dataclass under a structure name.

        Idempotent - re-registering the same class under the same name is a
        no-op.

        Args:
            name: Structure name referenced by attribute definitions
            struct_class: Dataclass whose fields all have defaults

        Returns:
            The registered descriptor

        Raises:
            TypeError: If struct_class is not a dataclass or cannot be built
                without arguments
            ValueError: If the name is taken by a different class
        """
        existing = cls._structs.get(name)
        if existing is not None:
            if existing.cls is struct_class:
                return existing
            raise ValueError(
                f"Struct '{name}' is already registered to {existing.cls.__qualname__}"
            )

        if not (isinstance(struct_class, type) and dataclasses.is_dataclass(struct_class)):
            raise TypeError(f"Struct '{name}' must be registered with a dataclass")

        try:
            empty = struct_class()
        except TypeError as exc:
            raise TypeError(
                f"Struct '{name}' needs a default for every field: {exc}"
            ) from exc

        descriptor = StructDescriptor(
            name=name,
            cls=struct_class,
            fields=tuple(f.name for f in dataclasses.fields(struct_class)),
            _empty=empty,
        )
        cls._structs[name] = descriptor
        logger.debug("Registered struct %s (%s)", name, struct_class.__qualname__)
        return descriptor

    @classmethod
    def resolve(cls, name: str) -> StructDescriptor:
        """Resolve a structure name.

        Raises:
            StructNotFoundError: If the name is not registered
        """
        try:
            return cls._structs[name]
        except (KeyError, TypeError):
            raise StructNotFoundError(name) from None

    @classmethod
    def name_for(cls, struct_class: type) -> str | None:
        """Registered name of a structure class, or None."""
        for name, descriptor in cls._structs.items():
            if descriptor.cls is struct_class:
                return name
        return None

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._structs

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._structs.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._structs.clear()


def struct_type(name: str) -> Callable[[type], type]:
    """Decorator to register a dataclass as a structure type.

    Apply it above ``@dataclass``:

        @struct_type("Shop.Address")
        @dataclass
        class Address:
            street: str = ""
    """

    def decorator(struct_class: type) -> type:
        StructTypeResolver.register(name, struct_class)
        return struct_class

    return decorator
