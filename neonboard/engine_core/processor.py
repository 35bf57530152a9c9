"""
Action Processor - Applies a batch of queued actions as one update.

The processor is the only place queued actions touch game state.

Design principles:
- Strict queue order (by created_at, stable for ties)
- Phase is read once; moves never change phase or turn
- Rejected actions stay queued and leave state untouched
- One consolidated result per batch
"""

from __future__ import annotations
import logging
from typing import Any, Iterable, TYPE_CHECKING

from .action import BatchResult, PendingAction, Rejection, RejectionReason
from .moves import MoveResolver
from .reducer import ReducerEngine
from .state import GameContext

if TYPE_CHECKING:
    from ..config_schema import GameConfig

logger = logging.getLogger(__name__)


class ActionProcessor:
    """
    Processes queued actions for one game config.

    Stateless between batches - the resolver tables are built once
    from the config and reused.
    """

    def __init__(self, config: GameConfig, engine: ReducerEngine | None = None):
        self.config = config
        self.resolver = MoveResolver(config)
        self.engine = engine or ReducerEngine()

    def process_batch(
        self,
        state: Any,
        context: GameContext,
        actions: Iterable[PendingAction],
    ) -> BatchResult:
        """
        Apply each action in order against the running state.

        Returns BatchResult with the final state and consumed action ids.
        """
        ordered = sorted(actions, key=lambda a: a.created_at)
        context = context.engine_fields()
        result = BatchResult(state=state, context=context)
        allowed = self.resolver.allowed_moves(context.phase)

        for action in ordered:
            if action.type not in allowed:
                self._reject(result, action, RejectionReason.NOT_ALLOWED)
                continue

            reducer = self.resolver.resolve(context.phase, action.type)
            if reducer is None:
                self._reject(result, action, RejectionReason.NO_REDUCER)
                continue

            outcome = self.engine.apply(
                reducer,
                result.state,
                action.payload,
                context.for_player(action.player_id),
                source=f"move:{action.type}",
                action_id=action.id,
            )
            if not outcome.ok:
                result.faults.append(outcome.fault)
                self._reject(
                    result, action, RejectionReason.REDUCER_FAULT, outcome.fault.error
                )
                continue

            result.state = outcome.state
            result.consumed_ids.append(action.id)

        if ordered:
            logger.info(
                "Processed %d queued action(s) in phase '%s': %d consumed, %d left queued",
                len(ordered),
                context.phase,
                len(result.consumed_ids),
                len(result.rejected),
            )
        return result

    def _reject(
        self,
        result: BatchResult,
        action: PendingAction,
        reason: RejectionReason,
        detail: str | None = None,
    ):
        logger.debug(
            "Action %s (%s) from %s left queued: %s",
            action.id,
            action.type,
            action.player_id,
            reason.value,
        )
        result.rejected.append(
            Rejection(
                action_id=action.id,
                action_type=action.type,
                reason=reason,
                detail=detail,
            )
        )


def process_batch(
    config: GameConfig,
    state: Any,
    context: GameContext,
    actions: Iterable[PendingAction],
) -> BatchResult:
    """
    Convenience function to process a batch.

    Creates an ActionProcessor and applies the actions.
    """
    return ActionProcessor(config).process_batch(state, context, actions)
