"""Runtime configuration for SlotForge."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class SlotForgeConfig:
    """Settings read at startup.

    Attributes:
        structs_path: YAML file declaring structure types, if any
        strict_types: Reject attribute type tags that are not registered
        log_level: Logging level name for the CLI
    """

    structs_path: Path | None = None
    strict_types: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> SlotForgeConfig:
        """Create config from environment variables.

        - SLOTFORGE_STRUCTS_PATH: path to a structure declarations file
        - SLOTFORGE_STRICT_TYPES: "1"/"true"/"yes"/"on" enables strict types
        - SLOTFORGE_LOG_LEVEL: e.g. "DEBUG" (default: WARNING)
        """
        structs_path = os.environ.get("SLOTFORGE_STRUCTS_PATH")
        strict = os.environ.get("SLOTFORGE_STRICT_TYPES", "")
        return cls(
            structs_path=Path(structs_path) if structs_path else None,
            strict_types=strict.strip().lower() in _TRUE_VALUES,
            log_level=os.environ.get("SLOTFORGE_LOG_LEVEL", "WARNING").upper(),
        )
