"""
Config Validation - Checks a GameConfig before a game is created.

Validates that:
1. Phase names are unique and at most one phase is flagged start
2. Reducers, hooks and setup are callable
3. The phase chain is well formed (warnings only; the engine truncates)
4. Global moves do not silently shadow phase moves (warning)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .game_config import GameConfig, PhaseDefinition
from ..engine_core.phase_graph import derive_initial_phase, derive_ordered_phases

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when config validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Config validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_config(config: GameConfig) -> ValidationResult:
    """
    Validate a complete game configuration.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if config.setup is not None and not callable(config.setup):
        errors.append("setup must be callable")

    for name, reducer in config.moves.items():
        if not name:
            errors.append("Global move has empty name")
        if not callable(reducer):
            errors.append(f"Global move '{name}' is not callable")

    if config.turns is not None:
        for hook_name in ("on_begin", "on_end"):
            hook = getattr(config.turns, hook_name)
            if hook is not None and not callable(hook):
                errors.append(f"turns.{hook_name} is not callable")

    seen: set[str] = set()
    start_phases: list[str] = []
    for phase in config.phases:
        if not phase.name:
            errors.append("Phase has empty name")
        if phase.name in seen:
            errors.append(f"Duplicate phase '{phase.name}'")
        seen.add(phase.name)
        if phase.start:
            start_phases.append(phase.name)
        errors.extend(_validate_phase(phase))
        warnings.extend(_shadowed_moves(phase, config))

    if len(start_phases) > 1:
        errors.append(
            f"More than one phase has start=True: {', '.join(start_phases)}"
        )

    warnings.extend(_validate_chain(config))

    if not config.phases:
        warnings.append("No phases defined - phase advancement needs an explicit target")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def load_config(data: GameConfig | Mapping[str, Any], strict: bool = True) -> GameConfig:
    """
    Build and validate a GameConfig.

    Raises ConfigValidationError if strict=True and errors exist.
    """
    config = data if isinstance(data, GameConfig) else GameConfig.from_dict(data)
    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config %s: %s", config.name or "<unnamed>", warning)
    if strict and not result.valid:
        raise ConfigValidationError(result.errors)
    return config


def _validate_phase(phase: PhaseDefinition) -> list[str]:
    """Validate a single phase declaration."""
    errors = []
    for hook_name in ("on_begin", "on_end"):
        hook = getattr(phase, hook_name)
        if hook is not None and not callable(hook):
            errors.append(f"Phase '{phase.name}': {hook_name} is not callable")

    for move_name, reducer in phase.moves.items():
        if not move_name:
            errors.append(f"Phase '{phase.name}' has a move with empty name")
        if not callable(reducer):
            errors.append(f"Phase '{phase.name}': move '{move_name}' is not callable")

    return errors


def _shadowed_moves(phase: PhaseDefinition, config: GameConfig) -> list[str]:
    return [
        f"Global move '{name}' shadows the move of the same name in phase '{phase.name}'"
        for name in phase.moves
        if name in config.moves
    ]


def _validate_chain(config: GameConfig) -> list[str]:
    """Report dangling pointers, truncated cycles and unreachable phases."""
    warnings = []
    for phase in config.phases:
        if phase.next and not config.has_phase(phase.next):
            warnings.append(
                f"Phase '{phase.name}' points at unknown phase '{phase.next}'"
            )

    order = derive_ordered_phases(config)
    if order:
        last = config.get_phase(order[-1])
        initial = derive_initial_phase(config)
        if last and last.next and last.next in order and last.next != initial:
            warnings.append(
                f"Phase chain loops back to '{last.next}' instead of '{initial}'; "
                f"order truncated to {order}"
            )

        reachable = set(order)
        for phase in config.phases:
            if phase.name and phase.name not in reachable:
                warnings.append(f"Phase '{phase.name}' is not reachable from '{order[0]}'")

    return warnings
