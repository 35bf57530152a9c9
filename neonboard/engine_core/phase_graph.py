"""
Phase Graph - Initial phase and linear phase order from a GameConfig.

The graph is given by a start flag and `next` pointers. Walking it never
raises: a cycle or a dangling `next` simply ends the walk.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config_schema import GameConfig


def derive_initial_phase(config: GameConfig) -> str:
    """
    The phase flagged `start=True`, else the first declared phase.

    Returns "" when no phases are configured. With several start flags
    the first one wins; validate_config() rejects that configuration.
    """
    if not config.phases:
        return ""
    for phase in config.phases:
        if phase.start is True:
            return phase.name
    return config.phases[0].name


def derive_ordered_phases(config: GameConfig) -> list[str]:
    """
    Follow `next` from the initial phase until no next, unknown target or revisit.
    """
    order: list[str] = []
    seen: set[str] = set()
    current = derive_initial_phase(config)
    while current and current not in seen:
        seen.add(current)
        order.append(current)
        phase = config.get_phase(current)
        target = phase.next if phase else None
        current = target if target and config.has_phase(target) else ""
    return order
