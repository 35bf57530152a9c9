"""
Engine Core - Deterministic game-state transitions.

The engine is the runtime that:
1. Derives the phase graph from a GameConfig
2. Validates queued actions against the current phase
3. Applies reducers under a fail-soft policy
4. Advances turns and phases with lifecycle hooks
5. Folds a batch of queued actions into one state update
"""

from .state import GameStatus, GameContext, ActionContext, SetupContext, GameSnapshot
from .action import (
    PendingAction,
    ReducerFault,
    ReducerOutcome,
    Rejection,
    RejectionReason,
    BatchResult,
    Transition,
)
from .phase_graph import derive_initial_phase, derive_ordered_phases
from .moves import MoveResolver, allowed_moves
from .reducer import ReducerEngine, apply_reducer
from .turns import TurnUpdate, compute_next_turn, advance_turn
from .phases import PhaseUpdate, compute_next_phase, advance_phase, run_phase_hooks
from .processor import ActionProcessor, process_batch

__all__ = [
    "GameStatus",
    "GameContext",
    "ActionContext",
    "SetupContext",
    "GameSnapshot",
    "PendingAction",
    "ReducerFault",
    "ReducerOutcome",
    "Rejection",
    "RejectionReason",
    "BatchResult",
    "Transition",
    "derive_initial_phase",
    "derive_ordered_phases",
    "MoveResolver",
    "allowed_moves",
    "ReducerEngine",
    "apply_reducer",
    "TurnUpdate",
    "compute_next_turn",
    "advance_turn",
    "PhaseUpdate",
    "compute_next_phase",
    "advance_phase",
    "run_phase_hooks",
    "ActionProcessor",
    "process_batch",
]
