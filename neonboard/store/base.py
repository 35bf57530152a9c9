"""
Game Store - Boundary contract between the engine host and storage.

One document per game plus an ordered queue of pending actions.

WRITE RULES:
- merge_game() is the authoritative write (board only): state, meta and
  every engine-context field
- update_game_state() is open to any caller: state and meta only
- Pending actions are added by anyone and deleted once consumed
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from ..engine_core.action import PendingAction
from ..engine_core.state import GameContext, GameSnapshot, GameStatus
from ..settings import NEONBOARD_PENDING_LIMIT


class NeonBoardError(Exception):
    """Base class for errors raised at the store/host boundary."""


class GameNotFoundError(NeonBoardError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Game not found: {key}")


class GameNotJoinableError(NeonBoardError):
    def __init__(self, game_id: str, status: GameStatus):
        self.game_id = game_id
        self.status = status
        super().__init__(f"Game {game_id} is not joinable (status: {status.value})")


class ProtectedFieldError(NeonBoardError):
    """A non-authoritative write touched engine-context fields."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Fields are engine-controlled: {', '.join(fields)}")


ENGINE_FIELDS = frozenset({
    "turn",
    "round",
    "phase",
    "status",
    "turn_order",
    "current_player_index",
    "phases",
})
OPEN_FIELDS = frozenset({"state", "meta"})
MERGEABLE_FIELDS = ENGINE_FIELDS | OPEN_FIELDS | {"board_id", "player_ids"}


@dataclass
class GameDocument:
    """
    Stored game record.

    Contains:
    - Join data (code, board, participants)
    - Author state and free-form metadata
    - Engine-context fields
    """
    join_code: str
    board_id: str | None = None
    player_ids: list[str] = field(default_factory=list)
    meta: dict[str, Any] | None = None
    created_at: float = 0.0
    status: GameStatus = GameStatus.WAITING

    state: Any = field(default_factory=dict)
    turn: int = 0
    round: int = 0
    phase: str = ""
    turn_order: list[str] = field(default_factory=list)
    current_player_index: int = 0
    phases: list[str] | None = None

    def context(self) -> GameContext:
        """Rebuild the engine context from the stored counters."""
        return GameContext(
            turn=self.turn,
            round=self.round,
            phase=self.phase,
            status=self.status,
            turn_order=tuple(self.turn_order),
            current_player_index=self.current_player_index,
            phases=tuple(self.phases) if self.phases else None,
        )

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            state=self.state,
            context=self.context(),
            meta=self.meta,
            board_id=self.board_id,
            player_ids=list(self.player_ids),
        )

    def merged(self, updates: dict[str, Any]) -> GameDocument:
        """Return a new document with `updates` applied."""
        unknown = set(updates) - MERGEABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown game fields: {', '.join(sorted(unknown))}")
        values = dict(updates)
        if "status" in values:
            values["status"] = GameStatus.parse(values["status"])
        for key in ("turn_order", "player_ids"):
            if key in values:
                values[key] = list(values[key])
        if "phases" in values and values["phases"] is not None:
            values["phases"] = list(values["phases"]) or None
        return replace(self, **values)


def ended_snapshot() -> GameSnapshot:
    """What subscribers see for a missing game document."""
    return GameSnapshot(
        state={},
        context=GameContext(status=GameStatus.ENDED),
        board_id=None,
        player_ids=[],
    )


SnapshotCallback = Callable[[GameSnapshot], None]
ActionsCallback = Callable[[list[PendingAction]], None]
Unsubscribe = Callable[[], None]


class GameStore(ABC):
    """
    Abstract async store for game documents and pending actions.

    Implementations wrap a remote document database; InMemoryGameStore
    is the reference implementation used in tests and single-process hosts.
    """

    @abstractmethod
    async def create_game(self, document: GameDocument) -> str:
        """Persist a new game; returns its id."""

    @abstractmethod
    async def get_game(self, game_id: str) -> GameDocument | None:
        """Read a game document."""

    @abstractmethod
    async def find_by_join_code(self, join_code: str) -> tuple[str, GameDocument] | None:
        """Find a game by join code (case-insensitive)."""

    @abstractmethod
    async def merge_game(self, game_id: str, updates: dict[str, Any]):
        """Authoritative partial write of engine and state fields."""

    async def update_game_state(
        self,
        game_id: str,
        updates: dict[str, Any],
    ):
        """
        Partial write open to any caller.

        Only `state` and `meta` are accepted.
        """
        protected = sorted(set(updates) - OPEN_FIELDS)
        if protected:
            raise ProtectedFieldError(protected)
        await self.merge_game(game_id, updates)

    @abstractmethod
    async def add_pending_action(
        self,
        game_id: str,
        player_id: str,
        action_type: str,
        payload: dict[str, Any] | None = None,
    ) -> str:
        """Queue an action; returns its id."""

    @abstractmethod
    async def list_pending_actions(
        self, game_id: str, limit: int = NEONBOARD_PENDING_LIMIT
    ) -> list[PendingAction]:
        """Oldest `limit` pending actions, ordered by created_at."""

    @abstractmethod
    async def delete_pending_action(self, game_id: str, action_id: str):
        """Remove a consumed action."""

    @abstractmethod
    def subscribe(self, game_id: str, callback: SnapshotCallback) -> Unsubscribe:
        """Call `callback` with a snapshot now and on every change."""

    @abstractmethod
    def subscribe_actions(self, game_id: str, callback: ActionsCallback) -> Unsubscribe:
        """Call `callback` with the pending queue now and on every change."""
