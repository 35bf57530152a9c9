"""
Counter - The smallest useful game.

One "play" phase with an `increment` move, a global `concede` move,
and turn hooks that keep a per-turn log. Used by the API quick start
and as a fixture in tests.
"""

from __future__ import annotations
from typing import Any

from ..config_schema import GameConfig, PhaseDefinition, TurnHooks
from ..engine_core.state import ActionContext, SetupContext


def _setup(ctx: SetupContext) -> dict[str, Any]:
    return {"score": 0, "turns_played": [], "conceded": []}


def _increment(state: dict, payload: dict, ctx: ActionContext) -> dict:
    amount = payload.get("amount", 1)
    if not isinstance(amount, int):
        raise ValueError(f"amount must be an integer, got {amount!r}")
    return {**state, "score": state["score"] + amount}


def _concede(state: dict, payload: dict, ctx: ActionContext) -> dict:
    return {**state, "conceded": [*state["conceded"], ctx.player_id]}


def _turn_end(state: dict, payload: dict, ctx: ActionContext) -> dict:
    return {**state, "turns_played": [*state["turns_played"], ctx.turn]}


def create_counter_config() -> GameConfig:
    """Counter game configuration."""
    return GameConfig(
        name="counter",
        setup=_setup,
        moves={"concede": _concede},
        turns=TurnHooks(on_end=_turn_end),
        phases=(
            PhaseDefinition(name="play", start=True, moves={"increment": _increment}),
        ),
    )
