"""
Games module - Built-in game configurations.

Each game module exposes a `create_<name>_config()` factory. The
registry below lets the API and CLI refer to games by name.
"""

from __future__ import annotations
from typing import Callable

from ..config_schema import GameConfig
from .counter import create_counter_config
from .poker import create_poker_config

GAMES: dict[str, Callable[[], GameConfig]] = {
    "counter": create_counter_config,
    "poker": create_poker_config,
}


def get_game_config(name: str) -> GameConfig:
    """Build a built-in game's config; raises KeyError for unknown names."""
    try:
        factory = GAMES[name]
    except KeyError:
        raise KeyError(f"Unknown game '{name}'. Available: {', '.join(sorted(GAMES))}") from None
    return factory()


__all__ = [
    "GAMES",
    "get_game_config",
    "create_counter_config",
    "create_poker_config",
]
