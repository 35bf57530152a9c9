"""
Engine State - Context values the engine threads through reducers.

Design principles:
- Frozen: reducers receive the context but cannot mutate it
- Reconstructable: everything derives from the counters plus turn order
- Game-agnostic: the author's game state is opaque and never inspected
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace, asdict
from enum import Enum
from typing import Any


class GameStatus(Enum):
    """Lifecycle status of a game document."""
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"

    @classmethod
    def parse(cls, value: GameStatus | str | None) -> GameStatus:
        """Missing status reads as active, matching older documents."""
        if value is None:
            return cls.ACTIVE
        if isinstance(value, cls):
            return value
        return cls(value)


@dataclass(frozen=True)
class GameContext:
    """
    Engine context: turn, round, phase, status, turn order, current player.

    Only the turn/phase advancers and the explicit setters produce new
    contexts; reducers only read them.
    """
    turn: int = 0
    round: int = 0
    phase: str = ""
    status: GameStatus = GameStatus.ACTIVE
    turn_order: tuple[str, ...] = ()
    current_player_index: int = 0
    phases: tuple[str, ...] | None = None

    def __post_init__(self):
        object.__setattr__(self, "turn_order", tuple(self.turn_order))
        if self.phases is not None:
            object.__setattr__(self, "phases", tuple(self.phases))
        object.__setattr__(self, "status", GameStatus.parse(self.status))

    @property
    def current_player_id(self) -> str | None:
        """Whose turn it is, or None when turn order is not enforced."""
        if not self.turn_order:
            return None
        return self.turn_order[self.current_player_index % len(self.turn_order)]

    def for_player(self, player_id: str) -> ActionContext:
        """Context handed to a reducer on behalf of a participant ("" = system)."""
        return ActionContext(
            turn=self.turn,
            round=self.round,
            phase=self.phase,
            status=self.status,
            turn_order=self.turn_order,
            current_player_index=self.current_player_index,
            phases=self.phases,
            player_id=player_id,
        )

    def engine_fields(self) -> GameContext:
        """Drop any reducer-only fields (player_id) and return a plain context."""
        return GameContext(
            turn=self.turn,
            round=self.round,
            phase=self.phase,
            status=self.status,
            turn_order=self.turn_order,
            current_player_index=self.current_player_index,
            phases=self.phases,
        )

    def _copy_with(self, **kwargs) -> GameContext:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["turn_order"] = list(self.turn_order)
        data["phases"] = list(self.phases) if self.phases is not None else None
        data["current_player_id"] = self.current_player_id
        return data


@dataclass(frozen=True)
class ActionContext(GameContext):
    """Engine context plus the participant who submitted the action."""
    player_id: str = ""


@dataclass(frozen=True)
class SetupContext:
    """Context passed to GameConfig.setup when a game is created."""
    phase: str = ""
    turn: int = 0
    round: int = 0
    status: GameStatus = GameStatus.WAITING
    turn_order: tuple[str, ...] = ()
    current_player_index: int = 0


@dataclass
class GameSnapshot:
    """
    Live view of a game for consumers.

    - state: the author's game data
    - context: engine context (read-only)
    - meta: free-form metadata
    """
    state: Any
    context: GameContext
    meta: dict[str, Any] | None = None
    board_id: str | None = None
    player_ids: list[str] = field(default_factory=list)
