"""Submission service for slot attributes.

Ties the validation engine to the persistence collaborator: a submission is
validated, and only an accepted definition is handed to the store.
"""

import logging
from typing import Any, Protocol

from slotforge.validation.engine import ValidationEngine
from slotforge.validation.types import AttributeDefinition, ValidationResult

logger = logging.getLogger(__name__)


class AttributeStore(Protocol):
    """Protocol for the persistence layer that keeps accepted attributes.

    Implementations key definitions by ``slot_id``. The engine never reads
    from the store.
    """

    def save(self, definition: AttributeDefinition) -> None:
        """Persist an accepted attribute definition."""
        ...


class SlotAttributeService:
    """Validates submissions and forwards accepted ones to a store."""

    def __init__(self, store: AttributeStore, engine: ValidationEngine | None = None):
        self.store = store
        self.engine = engine or ValidationEngine()

    def submit(self, data: dict[str, Any] | AttributeDefinition) -> ValidationResult:
        """Validate a submission and save it when valid.

        Raises:
            MalformedOptionsError: If the options bag is corrupt
        """
        if isinstance(data, AttributeDefinition):
            definition = data
        else:
            definition = AttributeDefinition.from_dict(data)

        result = self.engine.validate(definition)
        if result.valid:
            self.store.save(result.definition)
            logger.debug("Saved attribute %r for slot %r", definition.name, definition.slot_id)
        return result
