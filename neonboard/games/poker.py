"""
Poker - A four-phase betting loop.

    bet -> deal -> act -> resolve -> bet

Each phase has its own moves; entering "deal" deals cards and leaving
"resolve" pays out the pot. Ending "resolve" wraps back to "bet" and
counts a round.
"""

from __future__ import annotations
from typing import Any

from ..config_schema import GameConfig, PhaseDefinition
from ..engine_core.state import ActionContext, SetupContext

STARTING_CHIPS = 100


def _setup(ctx: SetupContext) -> dict[str, Any]:
    return {
        "chips": {player: STARTING_CHIPS for player in ctx.turn_order},
        "pot": 0,
        "dealt": 0,
        "folded": [],
        "log": [],
    }


def _chips(state: dict, player_id: str) -> int:
    return state["chips"].get(player_id, STARTING_CHIPS)


def _bet(state: dict, payload: dict, ctx: ActionContext) -> dict:
    amount = int(payload["amount"])
    if amount <= 0:
        raise ValueError("Bet must be positive")
    if amount > _chips(state, ctx.player_id):
        raise ValueError(f"{ctx.player_id} cannot cover {amount}")
    chips = {**state["chips"], ctx.player_id: _chips(state, ctx.player_id) - amount}
    return {**state, "chips": chips, "pot": state["pot"] + amount}


def _fold(state: dict, payload: dict, ctx: ActionContext) -> dict:
    return {**state, "folded": [*state["folded"], ctx.player_id]}


def _check(state: dict, payload: dict, ctx: ActionContext) -> dict:
    return {**state, "log": [*state["log"], f"{ctx.player_id} checks"]}


def _deal(state: dict, payload: dict, ctx: ActionContext) -> dict:
    return {**state, "dealt": state["dealt"] + 1}


def _payout(state: dict, payload: dict, ctx: ActionContext) -> dict:
    winner = state.get("winner")
    if not winner or not state["pot"]:
        return {**state, "folded": []}
    chips = {**state["chips"], winner: _chips(state, winner) + state["pot"]}
    return {**state, "chips": chips, "pot": 0, "folded": [], "winner": None}


def _declare_winner(state: dict, payload: dict, ctx: ActionContext) -> dict:
    return {**state, "winner": payload["player_id"]}


def create_poker_config() -> GameConfig:
    """Poker game configuration."""
    return GameConfig(
        name="poker",
        setup=_setup,
        moves={"fold": _fold},
        phases=(
            PhaseDefinition(name="bet", start=True, moves={"bet": _bet}, next="deal"),
            PhaseDefinition(name="deal", on_begin=_deal, next="act"),
            PhaseDefinition(name="act", moves={"bet": _bet, "check": _check}, next="resolve"),
            PhaseDefinition(
                name="resolve",
                moves={"declare_winner": _declare_winner},
                on_end=_payout,
                next="bet",
            ),
        ),
    )
