"""
Action System - Pending actions, reducer outcomes and batch results.

Pending actions represent:
1. A participant's request to run a move reducer
2. Queued in the store until the board consumes them

Outcomes and results carry failures as data, so the host can log or
surface them without the engine ever raising.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .state import GameContext


@dataclass(frozen=True)
class PendingAction:
    """
    A queued request to run a move reducer.

    Consumed exactly once by a successful application; otherwise it
    stays in the queue.
    """
    id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    player_id: str = ""
    created_at: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PendingAction:
        """Build from a stored record; accepts `playerId`/`createdAt` keys."""
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            payload=dict(data.get("payload") or {}),
            player_id=data.get("player_id", data.get("playerId", "")),
            created_at=float(data.get("created_at", data.get("createdAt", 0.0))),
        )


class RejectionReason(Enum):
    """Why a queued action was left in the queue."""
    NOT_ALLOWED = "not_allowed"  # Type not allowed in the current phase
    NO_REDUCER = "no_reducer"  # Allowed but nothing resolves
    REDUCER_FAULT = "reducer_fault"  # Reducer raised or returned nothing


@dataclass(frozen=True)
class ReducerFault:
    """A reducer or hook that failed; the prior state was kept."""
    source: str  # e.g. "move:increment", "phase:deal:on_begin", "turns:on_end"
    error: str
    error_type: str
    action_id: str | None = None


@dataclass
class ReducerOutcome:
    """
    Result of running one reducer.

    `state` is always usable: the new state on success, the prior
    state on failure.
    """
    ok: bool
    state: Any
    fault: ReducerFault | None = None

    @classmethod
    def success(cls, state: Any) -> ReducerOutcome:
        return cls(ok=True, state=state)

    @classmethod
    def failure(cls, prior_state: Any, fault: ReducerFault) -> ReducerOutcome:
        return cls(ok=False, state=prior_state, fault=fault)


@dataclass(frozen=True)
class Rejection:
    """A queued action that was not consumed."""
    action_id: str
    action_type: str
    reason: RejectionReason
    detail: str | None = None


@dataclass
class BatchResult:
    """
    Result of applying a batch of queued actions.

    Contains:
    - The accumulated state (single value to write back)
    - The unchanged engine context
    - Ids of consumed actions (to delete from the queue)
    - Rejections and reducer faults (left queued)
    """
    state: Any
    context: GameContext
    consumed_ids: list[str] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)
    faults: list[ReducerFault] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.consumed_ids)

    def document_update(self) -> dict[str, Any]:
        """The consolidated write: state plus context counters copied through."""
        return {
            "state": self.state,
            "turn": self.context.turn,
            "round": self.context.round,
            "phase": self.context.phase,
            "turn_order": list(self.context.turn_order),
            "current_player_index": self.context.current_player_index,
            "phases": list(self.context.phases) if self.context.phases is not None else None,
        }


@dataclass
class Transition:
    """
    Result of a turn or phase advance.

    `updates` holds only the engine fields that changed; `context` is
    the full post-transition context.
    """
    state: Any
    context: GameContext
    updates: dict[str, Any] = field(default_factory=dict)
    faults: list[ReducerFault] = field(default_factory=list)

    @property
    def round_advanced(self) -> bool:
        return "round" in self.updates

    def document_update(self) -> dict[str, Any]:
        return {**self.updates, "state": self.state}
