"""Tests for the type registry and the struct type resolver."""

import enum
from dataclasses import dataclass, field

import pytest

from slotforge.validation.registry import (
    BUILTIN_TYPES,
    Atom,
    TypeRegistry,
    UnknownTypeError,
    register_builtin_types,
)
from slotforge.validation.structs import (
    StructNotFoundError,
    StructTypeResolver,
    struct_type,
)


@pytest.fixture(autouse=True)
def setup_registries():
    """Register built-in types before each test and clear afterwards."""
    TypeRegistry.clear()
    StructTypeResolver.clear()
    register_builtin_types()
    yield
    TypeRegistry.clear()
    StructTypeResolver.clear()


@dataclass
class Address:
    street: str = ""
    city: str | None = None
    tags: list = field(default_factory=list)


@dataclass
class Point:
    x: int
    y: int


class Color(enum.Enum):
    RED = "red"


# =============================================================================
# Type tags
# =============================================================================


class TestResolveType:
    def test_builtin_tags_registered(self):
        for tag in BUILTIN_TYPES:
            assert TypeRegistry.resolve_type(tag).tag == tag

    def test_struct_tag_always_known(self):
        assert TypeRegistry.resolve_type("struct").tag == "struct"
        assert TypeRegistry.is_registered("struct")

    def test_unknown_tag_raises(self):
        with pytest.raises(UnknownTypeError) as exc_info:
            TypeRegistry.resolve_type("strnig")
        assert exc_info.value.tag == "strnig"

    def test_non_string_tag_is_unknown(self):
        assert not TypeRegistry.is_registered(None)
        assert not TypeRegistry.is_registered(["string"])
        with pytest.raises(UnknownTypeError):
            TypeRegistry.resolve_type(None)

    def test_register_is_idempotent(self):
        TypeRegistry.register("string", lambda value: False)
        assert TypeRegistry.matches("string", "still a string")

    def test_register_custom_tag(self):
        TypeRegistry.register("even", lambda value: isinstance(value, int) and value % 2 == 0)
        assert TypeRegistry.matches("even", 4)
        assert not TypeRegistry.matches("even", 3)

    def test_list_registered_includes_struct(self):
        tags = TypeRegistry.list_registered()
        assert "struct" in tags
        assert "integer" in tags
        assert tags == sorted(tags)


class TestMatches:
    @pytest.mark.parametrize(
        "tag,value",
        [
            ("string", "hello"),
            ("integer", 3),
            ("float", 1.5),
            ("boolean", False),
            ("atom", Atom("primary")),
            ("atom", Color.RED),
            ("list", [1, 2]),
            ("list", (1, 2)),
            ("map", {"a": 1}),
            ("global", {"class": "x"}),
            ("any", object()),
        ],
    )
    def test_matching_values(self, tag, value):
        assert TypeRegistry.matches(tag, value)

    @pytest.mark.parametrize(
        "tag,value",
        [
            ("string", 1),
            ("string", Atom("x")),
            ("integer", 1.0),
            ("integer", True),
            ("float", 1),
            ("boolean", 0),
            ("atom", "primary"),
            ("list", "abc"),
            ("list", {"a": 1}),
            ("map", [("a", 1)]),
        ],
    )
    def test_non_matching_values(self, tag, value):
        assert not TypeRegistry.matches(tag, value)

    def test_none_matches_every_tag(self):
        for tag in TypeRegistry.list_registered():
            assert TypeRegistry.matches(tag, None)

    def test_unknown_tag_matches_nothing(self):
        assert not TypeRegistry.matches("strnig", "x")

    def test_struct_matches_registered_instance(self):
        StructTypeResolver.register("Shop.Address", Address)
        assert TypeRegistry.matches("struct", Address(), "Shop.Address")
        assert not TypeRegistry.matches("struct", {"street": ""}, "Shop.Address")

    def test_struct_without_name_or_registration(self):
        assert not TypeRegistry.matches("struct", Address())
        assert not TypeRegistry.matches("struct", Address(), "Shop.Address")


# =============================================================================
# Structs
# =============================================================================


class TestStructTypeResolver:
    def test_register_and_resolve(self):
        descriptor = StructTypeResolver.register("Shop.Address", Address)
        assert StructTypeResolver.resolve("Shop.Address") is descriptor
        assert descriptor.fields == ("street", "city", "tags")
        assert descriptor.cls is Address

    def test_resolve_unknown_raises(self):
        with pytest.raises(StructNotFoundError) as exc_info:
            StructTypeResolver.resolve("Shop.Missing")
        assert str(exc_info.value) == "the struct Shop.Missing is undefined"

    def test_resolve_never_evaluates_names(self):
        with pytest.raises(StructNotFoundError):
            TypeRegistry.resolve_struct("__import__('os').getcwd()")

    def test_register_same_class_is_noop(self):
        first = StructTypeResolver.register("Shop.Address", Address)
        assert StructTypeResolver.register("Shop.Address", Address) is first

    def test_register_other_class_under_taken_name(self):
        StructTypeResolver.register("Shop.Address", Address)
        with pytest.raises(ValueError):
            StructTypeResolver.register("Shop.Address", Point)

    def test_register_requires_dataclass(self):
        with pytest.raises(TypeError):
            StructTypeResolver.register("Shop.Plain", dict)

    def test_register_requires_field_defaults(self):
        with pytest.raises(TypeError):
            StructTypeResolver.register("Geo.Point", Point)
        assert not StructTypeResolver.is_registered("Geo.Point")

    def test_decorator_registers(self):
        @struct_type("Shop.Tag")
        @dataclass
        class Tag:
            label: str = ""

        assert StructTypeResolver.is_registered("Shop.Tag")
        assert StructTypeResolver.name_for(Tag) == "Shop.Tag"

    def test_name_for_unregistered_class(self):
        assert StructTypeResolver.name_for(Address) is None

    def test_empty_instance_is_fresh_copy(self):
        descriptor = StructTypeResolver.register("Shop.Address", Address)
        first = TypeRegistry.empty_instance(descriptor)
        first.tags.append("changed")
        assert TypeRegistry.empty_instance(descriptor) == Address()
