"""Validation engine for slot attribute definitions.

Decodes the options bag, then folds the ordered rule list over the
definition. The accumulator carries the errors found so far; gated rules
hand it back unchanged once it holds any error.
"""

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from functools import reduce
from typing import Any

from slotforge.validation.codec import MalformedOptionsError, decode
from slotforge.validation.rules import Rule, RuleContext, build_rule_set
from slotforge.validation.types import (
    AttributeDefinition,
    ErrorCode,
    ValidationError,
    ValidationResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Accumulator:
    errors: tuple[ValidationError, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


class ValidationEngine:
    """Runs the rule set against attribute definitions.

    The engine holds no per-call state, so one instance can serve any
    number of concurrent validations.

    Example:
        engine = ValidationEngine()
        result = engine.validate(AttributeDefinition(
            name="title", type_tag="string", options={"required": True},
        ))
        assert result.valid
    """

    def __init__(
        self,
        rules: Iterable[Rule] | None = None,
        strict_types: bool = False,
    ):
        if rules is None:
            rules = build_rule_set(strict_types=strict_types)
        self.rules: tuple[Rule, ...] = tuple(rules)

    def validate(self, definition: AttributeDefinition) -> ValidationResult:
        """Validate one attribute definition.

        Returns:
            ValidationResult. When valid, ``definition`` carries the decoded
            options.

        Raises:
            MalformedOptionsError: If the options bag cannot be decoded. No
                rule runs in that case.
        """
        options = decode(definition.options)
        ctx = RuleContext(definition=definition, options=options)

        acc = reduce(
            lambda current, rule: self._apply(rule, current, ctx),
            self.rules,
            _Accumulator(),
        )

        if acc.valid:
            return ValidationResult.accepted(dataclasses.replace(definition, options=options))

        logger.debug(
            "Attribute %r rejected with %d error(s)", definition.name, len(acc.errors)
        )
        return ValidationResult.rejected(list(acc.errors))

    def validate_dict(self, data: dict[str, Any]) -> ValidationResult:
        """Validate a submitted dict (see AttributeDefinition.from_dict)."""
        return self.validate(AttributeDefinition.from_dict(data))

    def validate_many(self, records: Iterable[Any]) -> list[ValidationResult]:
        """Validate independent submissions, one result per record.

        Records may be AttributeDefinition instances or submission dicts. A
        record whose options cannot be decoded is reported as a
        MALFORMED_OPTIONS error instead of aborting the batch.
        """
        results = []
        for record in records:
            if not isinstance(record, AttributeDefinition):
                record = AttributeDefinition.from_dict(record)
            try:
                results.append(self.validate(record))
            except MalformedOptionsError as exc:
                logger.warning("Malformed options for attribute %r: %s", record.name, exc)
                results.append(ValidationResult.rejected([
                    ValidationError(
                        message=str(exc),
                        code=ErrorCode.MALFORMED_OPTIONS,
                        field="options",
                    )
                ]))
        return results

    @staticmethod
    def _apply(rule: Rule, acc: _Accumulator, ctx: RuleContext) -> _Accumulator:
        if rule.gated and not acc.valid:
            return acc
        errors = rule.check(ctx)
        if not errors:
            return acc
        logger.debug("Rule %s reported %d error(s)", rule.name, len(errors))
        return _Accumulator(errors=acc.errors + tuple(errors))
