"""
Turn Advancer - Next turn counter, current player and round.

compute_next_turn() is pure math on the context. advance_turn() adds the
hook sequencing: turns.on_end with the outgoing context, then
turns.on_begin with the incoming one.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from .action import Transition
from .reducer import ReducerEngine
from .state import GameContext

if TYPE_CHECKING:
    from ..config_schema import GameConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnUpdate:
    """Engine fields changed by one turn advance."""
    turn: int
    current_player_index: int | None = None
    round: int | None = None

    def as_dict(self) -> dict[str, Any]:
        updates: dict[str, Any] = {"turn": self.turn}
        if self.current_player_index is not None:
            updates["current_player_index"] = self.current_player_index
        if self.round is not None:
            updates["round"] = self.round
        return updates

    def apply_to(self, context: GameContext) -> GameContext:
        return context._copy_with(**self.as_dict())


def compute_next_turn(context: GameContext) -> TurnUpdate:
    """
    Advance the turn counter and, with a turn order, the current player.

    The round increments when the index wraps back to 0.
    """
    order = context.turn_order
    if not order:
        return TurnUpdate(turn=context.turn + 1)

    next_index = (context.current_player_index + 1) % len(order)
    return TurnUpdate(
        turn=context.turn + 1,
        current_player_index=next_index,
        round=context.round + 1 if next_index == 0 else None,
    )


def advance_turn(
    config: GameConfig | None,
    state: Any,
    context: GameContext,
    engine: ReducerEngine | None = None,
) -> Transition:
    """
    Compute the next turn and run the turn hooks around it.

    Hook faults keep the pre-hook state; the counters advance regardless.
    """
    engine = engine or ReducerEngine()
    update = compute_next_turn(context)
    incoming = update.apply_to(context.engine_fields())

    faults = []
    hooks = config.turns if config else None
    if hooks is not None and not hooks.is_empty:
        outcome = engine.run_hook(
            hooks.on_end, state, context.for_player(""), source="turns:on_end"
        )
        if outcome.fault:
            faults.append(outcome.fault)
        state = outcome.state

        outcome = engine.run_hook(
            hooks.on_begin, state, incoming.for_player(""), source="turns:on_begin"
        )
        if outcome.fault:
            faults.append(outcome.fault)
        state = outcome.state

    logger.info(
        "Turn %d -> %d (player %s, round %d)",
        context.turn,
        incoming.turn,
        incoming.current_player_id,
        incoming.round,
    )
    return Transition(state=state, context=incoming, updates=update.as_dict(), faults=faults)
