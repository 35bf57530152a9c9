"""
Reducer Engine - Runs author reducers under one failure policy.

Every move and lifecycle hook goes through ReducerEngine.apply().

Design principles:
- Never raises: any exception becomes a ReducerFault
- Prior state is kept on failure
- A reducer that returns None produced no usable state
- Faults are logged and returned, never silently dropped
"""

from __future__ import annotations
import logging
from typing import Any, TYPE_CHECKING

from .action import ReducerFault, ReducerOutcome

if TYPE_CHECKING:
    from .state import ActionContext
    from ..config_schema.game_config import ReducerFn

logger = logging.getLogger(__name__)

# Hooks get no payload
EMPTY_PAYLOAD: dict[str, Any] = {}


class ReducerEngine:
    """
    Applies a single reducer to a state value.

    Stateless - safe to share between games.
    """

    def apply(
        self,
        reducer: ReducerFn | None,
        state: Any,
        payload: dict[str, Any],
        context: ActionContext,
        source: str = "move",
        action_id: str | None = None,
    ) -> ReducerOutcome:
        """
        Run `reducer(state, payload, context)`.

        Returns ReducerOutcome with the new state, or the prior state
        and a fault.
        """
        if reducer is None or not callable(reducer):
            return self._fail(
                state, source, "Reducer is not callable", "TypeError", action_id
            )

        try:
            new_state = reducer(state, payload, context)
        except Exception as e:
            return self._fail(state, source, str(e), type(e).__name__, action_id)

        if new_state is None:
            return self._fail(
                state, source, "Reducer returned no state", "NoResult", action_id
            )
        return ReducerOutcome.success(new_state)

    def run_hook(
        self,
        hook: ReducerFn | None,
        state: Any,
        context: ActionContext,
        source: str,
    ) -> ReducerOutcome:
        """Run an optional lifecycle hook; absence is a successful no-op."""
        if hook is None:
            return ReducerOutcome.success(state)
        return self.apply(hook, state, EMPTY_PAYLOAD, context, source=source)

    def _fail(
        self,
        state: Any,
        source: str,
        error: str,
        error_type: str,
        action_id: str | None,
    ) -> ReducerOutcome:
        fault = ReducerFault(
            source=source,
            error=error,
            error_type=error_type,
            action_id=action_id,
        )
        logger.warning("Reducer %s failed (%s): %s", source, error_type, error)
        return ReducerOutcome.failure(state, fault)


_default_engine = ReducerEngine()


def apply_reducer(
    reducer: ReducerFn | None,
    state: Any,
    payload: dict[str, Any],
    context: ActionContext,
) -> ReducerOutcome:
    """Convenience function using a shared ReducerEngine."""
    return _default_engine.apply(reducer, state, payload, context)
