"""Validation rules for slot attribute definitions.

Rules run in a fixed order. Each rule inspects the definition and its decoded
options and returns zero or more errors. Gated rules only run while no error
has been recorded; they assume the shape checks before them passed.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Callable

from slotforge.validation.codec import AttributeOptions
from slotforge.validation.registry import STRUCT_TAG, TypeRegistry
from slotforge.validation.structs import StructNotFoundError
from slotforge.validation.types import AttributeDefinition, ErrorCode, ValidationError

NAME_PATTERN = re.compile(r"[a-zA-Z0-9_!?]+")


@dataclass(frozen=True)
class RuleContext:
    """What a rule gets to look at."""

    definition: AttributeDefinition
    options: AttributeOptions


RuleCheck = Callable[[RuleContext], list[ValidationError]]


@dataclass(frozen=True)
class Rule:
    """A named validation rule.

    Attributes:
        name: Identifier used in logs and tests
        check: Function returning the errors found
        gated: If true, the rule is skipped once any error has been recorded
    """

    name: str
    check: RuleCheck
    gated: bool = False


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def _is_non_empty_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) > 0


def _same_value(a: Any, b: Any) -> bool:
    # 1, 1.0 and True compare equal in Python but are different values here,
    # including inside containers
    if type(a) is not type(b):
        return False
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(_same_value(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping):
        return a.keys() == b.keys() and all(_same_value(a[k], b[k]) for k in a)
    if is_dataclass(a):
        return all(
            _same_value(getattr(a, f.name), getattr(b, f.name))
            for f in fields(a)
        )
    return a == b


def _type_mismatch(value: Any, tag: Any, field: str) -> ValidationError:
    return ValidationError(
        message=f"expected {value!r} to be of type {tag}",
        code=ErrorCode.TYPE_MISMATCH,
        field=field,
    )


# =============================================================================
# Shape rules (ungated)
# =============================================================================


def check_required_fields(ctx: RuleContext) -> list[ValidationError]:
    errors = []
    for field_name in ("name", "type_tag"):
        if _is_blank(getattr(ctx.definition, field_name)):
            errors.append(ValidationError(
                message="can't be blank",
                code=ErrorCode.MISSING_REQUIRED_FIELD,
                field=field_name,
            ))
    return errors


def check_name_format(ctx: RuleContext) -> list[ValidationError]:
    name = ctx.definition.name
    if _is_blank(name):
        return []
    if isinstance(name, str) and NAME_PATTERN.fullmatch(name):
        return []
    return [ValidationError(
        message="can only contain letters, numbers, and underscores",
        code=ErrorCode.INVALID_NAME_FORMAT,
        field="name",
    )]


def check_type_tag_known(ctx: RuleContext) -> list[ValidationError]:
    tag = ctx.definition.type_tag
    if _is_blank(tag) or TypeRegistry.is_registered(tag):
        return []
    return [ValidationError(
        message=f"unknown type '{tag}'",
        code=ErrorCode.UNKNOWN_TYPE,
        field="type_tag",
    )]


def check_struct_name_required(ctx: RuleContext) -> list[ValidationError]:
    if ctx.definition.type_tag == STRUCT_TAG and _is_blank(ctx.definition.struct_name):
        return [ValidationError(
            message="is required when type is 'struct'",
            code=ErrorCode.MISSING_REQUIRED_FIELD,
            field="struct_name",
        )]
    return []


def check_struct_name_resolves(ctx: RuleContext) -> list[ValidationError]:
    struct_name = ctx.definition.struct_name
    if _is_blank(struct_name):
        return []
    try:
        TypeRegistry.resolve_struct(struct_name)
    except StructNotFoundError as exc:
        return [ValidationError(
            message=str(exc),
            code=ErrorCode.STRUCT_NOT_FOUND,
            field="struct_name",
        )]
    return []


def check_non_empty_examples(ctx: RuleContext) -> list[ValidationError]:
    if ctx.options.has("examples") and not _is_non_empty_list(ctx.options.examples):
        return [ValidationError(
            message="if provided, examples must be a non-empty list",
            code=ErrorCode.NON_EMPTY_LIST_REQUIRED,
            field="examples",
        )]
    return []


def check_non_empty_values(ctx: RuleContext) -> list[ValidationError]:
    if ctx.options.has("values") and not _is_non_empty_list(ctx.options.values):
        return [ValidationError(
            message="if provided, values must be a non-empty list",
            code=ErrorCode.NON_EMPTY_LIST_REQUIRED,
            field="values",
        )]
    return []


def check_mutually_exclusive_options(ctx: RuleContext) -> list[ValidationError]:
    options = ctx.options
    errors = []
    if options.get("required") is not None and options.has("default"):
        errors.append(ValidationError(
            message="only one of 'Required' or 'Default' attribute must be given",
            code=ErrorCode.MUTUALLY_EXCLUSIVE_OPTIONS,
            field="default",
        ))
    if options.has("values") and options.has("examples"):
        errors.append(ValidationError(
            message="only one of 'Accepted values' or 'Examples' must be given",
            code=ErrorCode.MUTUALLY_EXCLUSIVE_OPTIONS,
            field="examples",
        ))
    return errors


# =============================================================================
# Value rules
# =============================================================================


def check_default_in_values(ctx: RuleContext) -> list[ValidationError]:
    options = ctx.options
    values = options.get("values")
    if not options.has("default") or values is None:
        return []
    if any(_same_value(options.default, v) for v in values):
        return []
    return [ValidationError(
        message="expected the default value to be one of the Accepted Values list",
        code=ErrorCode.VALUE_NOT_IN_ALLOWED_SET,
        field="default",
    )]


def check_default_matches_type(ctx: RuleContext) -> list[ValidationError]:
    definition = ctx.definition
    default = ctx.options.get("default")
    if TypeRegistry.matches(definition.type_tag, default, definition.struct_name):
        return []
    return [_type_mismatch(default, definition.type_tag, "default")]


def check_struct_default_equality(ctx: RuleContext) -> list[ValidationError]:
    struct_name = ctx.definition.struct_name
    default = ctx.options.get("default")
    if _is_blank(struct_name) or default is None:
        return []

    # Resolvable: check_struct_name_resolves passed before this gated rule
    descriptor = TypeRegistry.resolve_struct(struct_name)
    if default == TypeRegistry.empty_instance(descriptor):
        return []
    return [ValidationError(
        message=f"expected the default value to be a {struct_name} struct",
        code=ErrorCode.STRUCT_DEFAULT_MISMATCH,
        field="default",
    )]


def _check_elements(ctx: RuleContext, key: str) -> list[ValidationError]:
    definition = ctx.definition
    return [
        _type_mismatch(value, definition.type_tag, key)
        for value in ctx.options.get(key, [])
        if not TypeRegistry.matches(definition.type_tag, value, definition.struct_name)
    ]


def check_examples_match_type(ctx: RuleContext) -> list[ValidationError]:
    return _check_elements(ctx, "examples")


def check_values_match_type(ctx: RuleContext) -> list[ValidationError]:
    return _check_elements(ctx, "values")


# =============================================================================
# Rule set
# =============================================================================


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("required_fields", check_required_fields),
    Rule("name_format", check_name_format),
    Rule("struct_name_required", check_struct_name_required),
    Rule("struct_name_resolves", check_struct_name_resolves),
    Rule("non_empty_examples", check_non_empty_examples),
    Rule("non_empty_values", check_non_empty_values),
    Rule("mutually_exclusive_options", check_mutually_exclusive_options),
    Rule("default_in_values", check_default_in_values, gated=True),
    Rule("default_matches_type", check_default_matches_type),
    Rule("struct_default_equality", check_struct_default_equality, gated=True),
    Rule("examples_match_type", check_examples_match_type, gated=True),
    Rule("values_match_type", check_values_match_type, gated=True),
)

TYPE_TAG_KNOWN = Rule("type_tag_known", check_type_tag_known)


def build_rule_set(strict_types: bool = False) -> tuple[Rule, ...]:
    """Build the ordered rule list.

    Args:
        strict_types: Also reject type tags that are not registered. The
            check runs right after the name format rule.
    """
    if not strict_types:
        return DEFAULT_RULES
    return DEFAULT_RULES[:2] + (TYPE_TAG_KNOWN,) + DEFAULT_RULES[2:]
