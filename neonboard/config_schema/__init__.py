"""Game configuration schema - moves, phases, hooks and validation."""

from .game_config import GameConfig, PhaseDefinition, TurnHooks
from .validation import (
    validate_config,
    load_config,
    ValidationResult,
    ConfigValidationError,
)

__all__ = [
    "GameConfig",
    "PhaseDefinition",
    "TurnHooks",
    "validate_config",
    "load_config",
    "ValidationResult",
    "ConfigValidationError",
]
