"""
Phase Advancer - Next phase (explicit or by the derived order) and round.

compute_next_phase() is pure. advance_phase() runs the leaving phase's
on_end with the pre-transition context, then the entering phase's
on_begin with the phase field updated. Turn order and current player
are never touched by a phase transition.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from .action import ReducerFault, Transition
from .reducer import ReducerEngine
from .state import ActionContext, GameContext

if TYPE_CHECKING:
    from ..config_schema import GameConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseUpdate:
    """Engine fields changed by one phase advance."""
    phase: str
    round: int | None = None

    def as_dict(self) -> dict[str, Any]:
        updates: dict[str, Any] = {"phase": self.phase}
        if self.round is not None:
            updates["round"] = self.round
        return updates

    def apply_to(self, context: GameContext) -> GameContext:
        return context._copy_with(**self.as_dict())


def compute_next_phase(
    context: GameContext, target: str | None = None
) -> PhaseUpdate | None:
    """
    Explicit target wins (no round change); otherwise step the ordered phases.

    An unknown current phase enters the first phase and counts as a
    wrap. Returns None when there is neither a target nor an ordered
    phase list.
    """
    if target:
        return PhaseUpdate(phase=target)

    phases = context.phases
    if not phases:
        return None

    if context.phase in phases:
        next_index = (phases.index(context.phase) + 1) % len(phases)
    else:
        next_index = 0
    return PhaseUpdate(
        phase=phases[next_index],
        round=context.round + 1 if next_index == 0 else None,
    )


def run_phase_hooks(
    config: GameConfig,
    leaving: str,
    entering: str,
    state: Any,
    context: ActionContext,
    engine: ReducerEngine | None = None,
) -> tuple[Any, list[ReducerFault]]:
    """
    Run leaving.on_end then entering.on_begin.

    Returns the final state and any hook faults.
    """
    engine = engine or ReducerEngine()
    faults: list[ReducerFault] = []

    current = config.get_phase(leaving)
    if current is not None:
        outcome = engine.run_hook(
            current.on_end, state, context, source=f"phase:{leaving}:on_end"
        )
        if outcome.fault:
            faults.append(outcome.fault)
        state = outcome.state

    upcoming = config.get_phase(entering)
    if upcoming is not None:
        outcome = engine.run_hook(
            upcoming.on_begin,
            state,
            context._copy_with(phase=entering),
            source=f"phase:{entering}:on_begin",
        )
        if outcome.fault:
            faults.append(outcome.fault)
        state = outcome.state

    return state, faults


def advance_phase(
    config: GameConfig | None,
    state: Any,
    context: GameContext,
    target: str | None = None,
    engine: ReducerEngine | None = None,
) -> Transition | None:
    """
    Compute the next phase and run the phase hooks around it.

    Returns None when no advance is possible (reported as a no-op).
    """
    update = compute_next_phase(context, target)
    if update is None:
        logger.debug("No phase order configured and no target; phase stays '%s'", context.phase)
        return None

    faults: list[ReducerFault] = []
    if config is not None and config.phases:
        state, faults = run_phase_hooks(
            config, context.phase, update.phase, state, context.for_player(""), engine
        )

    incoming = update.apply_to(context.engine_fields())
    logger.info(
        "Phase '%s' -> '%s' (round %d)", context.phase, incoming.phase, incoming.round
    )
    return Transition(state=state, context=incoming, updates=update.as_dict(), faults=faults)
