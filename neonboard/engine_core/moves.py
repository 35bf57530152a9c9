"""
Move Resolver - Which moves a phase allows, and which reducer runs them.

Two-tier lookup built once per config:
1. Global moves (allowed in every phase)
2. Phase-scoped moves

A global move shadows a phase move of the same name.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config_schema import GameConfig
    from ..config_schema.game_config import ReducerFn


class MoveResolver:
    """
    Lookup tables for move validation and dispatch.

    Usage:
        resolver = MoveResolver(config)
        if "bet" in resolver.allowed_moves(context.phase):
            reducer = resolver.resolve(context.phase, "bet")
    """

    def __init__(self, config: GameConfig):
        self._global: dict[str, ReducerFn] = dict(config.moves)
        self._by_phase: dict[str, dict[str, ReducerFn]] = {}
        for phase in config.phases:
            # First declaration wins, matching GameConfig.get_phase()
            self._by_phase.setdefault(phase.name, dict(phase.moves))

        self._allowed: dict[str, frozenset[str]] = {
            name: frozenset(self._global) | frozenset(moves)
            for name, moves in self._by_phase.items()
        }
        self._global_only = frozenset(self._global)

    def allowed_moves(self, phase: str) -> frozenset[str]:
        """Global move names plus the phase's own move names."""
        return self._allowed.get(phase, self._global_only)

    def is_allowed(self, phase: str, action_type: str) -> bool:
        return action_type in self.allowed_moves(phase)

    def resolve(self, phase: str, action_type: str) -> ReducerFn | None:
        """Global table first, then the phase table."""
        reducer = self._global.get(action_type)
        if reducer is not None:
            return reducer
        return self._by_phase.get(phase, {}).get(action_type)


def allowed_moves(config: GameConfig, phase: str) -> frozenset[str]:
    """Convenience wrapper; builds a resolver for one lookup."""
    return MoveResolver(config).allowed_moves(phase)
