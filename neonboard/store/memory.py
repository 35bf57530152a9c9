"""
In-Memory Store - Reference GameStore for tests and single-process hosts.

No persistence - documents live as long as the store object.
Subscribers are called synchronously after every write.
"""

from __future__ import annotations
import logging
import time
import uuid
from typing import Any

from ..engine_core.action import PendingAction
from ..settings import NEONBOARD_PENDING_LIMIT
from .base import (
    ActionsCallback,
    GameDocument,
    GameNotFoundError,
    GameStore,
    SnapshotCallback,
    Unsubscribe,
    ended_snapshot,
)
from .codes import normalize_join_code

logger = logging.getLogger(__name__)


class InMemoryGameStore(GameStore):
    """
    Dict-backed store.

    created_at is kept strictly increasing so queue order equals
    submission order even within one clock tick.
    """

    def __init__(self):
        self._games: dict[str, GameDocument] = {}
        self._actions: dict[str, dict[str, PendingAction]] = {}
        self._game_subscribers: dict[str, list[SnapshotCallback]] = {}
        self._action_subscribers: dict[str, list[ActionsCallback]] = {}
        self._last_timestamp = 0.0

    async def create_game(self, document: GameDocument) -> str:
        game_id = uuid.uuid4().hex
        self._games[game_id] = document
        self._actions[game_id] = {}
        self._notify_game(game_id)
        return game_id

    async def get_game(self, game_id: str) -> GameDocument | None:
        return self._games.get(game_id)

    async def find_by_join_code(self, join_code: str) -> tuple[str, GameDocument] | None:
        normalized = normalize_join_code(join_code)
        for game_id, document in self._games.items():
            if document.join_code == normalized:
                return game_id, document
        return None

    async def merge_game(self, game_id: str, updates: dict[str, Any]):
        document = self._games.get(game_id)
        if document is None:
            raise GameNotFoundError(game_id)
        self._games[game_id] = document.merged(updates)
        self._notify_game(game_id)

    async def add_pending_action(
        self,
        game_id: str,
        player_id: str,
        action_type: str,
        payload: dict[str, Any] | None = None,
    ) -> str:
        if game_id not in self._games:
            raise GameNotFoundError(game_id)
        action = PendingAction(
            id=uuid.uuid4().hex,
            type=action_type,
            payload=dict(payload or {}),
            player_id=player_id,
            created_at=self._next_timestamp(),
        )
        self._actions[game_id][action.id] = action
        self._notify_actions(game_id)
        return action.id

    async def list_pending_actions(
        self, game_id: str, limit: int = NEONBOARD_PENDING_LIMIT
    ) -> list[PendingAction]:
        return self._ordered_actions(game_id)[:limit]

    async def delete_pending_action(self, game_id: str, action_id: str):
        queue = self._actions.get(game_id, {})
        if queue.pop(action_id, None) is not None:
            self._notify_actions(game_id)

    def subscribe(self, game_id: str, callback: SnapshotCallback) -> Unsubscribe:
        subscribers = self._game_subscribers.setdefault(game_id, [])
        subscribers.append(callback)
        callback(self._snapshot(game_id))

        def unsubscribe():
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    def subscribe_actions(self, game_id: str, callback: ActionsCallback) -> Unsubscribe:
        subscribers = self._action_subscribers.setdefault(game_id, [])
        subscribers.append(callback)
        callback(self._ordered_actions(game_id)[:NEONBOARD_PENDING_LIMIT])

        def unsubscribe():
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    def _ordered_actions(self, game_id: str) -> list[PendingAction]:
        queue = self._actions.get(game_id, {})
        return sorted(queue.values(), key=lambda a: a.created_at)

    def _snapshot(self, game_id: str):
        document = self._games.get(game_id)
        return document.snapshot() if document else ended_snapshot()

    def _next_timestamp(self) -> float:
        now = time.time()
        if now <= self._last_timestamp:
            now = self._last_timestamp + 1e-6
        self._last_timestamp = now
        return now

    def _notify_game(self, game_id: str):
        snapshot = self._snapshot(game_id)
        for callback in list(self._game_subscribers.get(game_id, [])):
            callback(snapshot)

    def _notify_actions(self, game_id: str):
        actions = self._ordered_actions(game_id)[:NEONBOARD_PENDING_LIMIT]
        for callback in list(self._action_subscribers.get(game_id, [])):
            callback(actions)
