"""
Processing Leases - At most one mutating operation per game at a time.

A lease is an asyncio.Lock keyed by game id. Its lifetime is the
lifetime of the operation holding it, so nothing leaks across games or
outlives a failed batch. The lease also remembers the signature of the
last batch applied, so an identical queue against an identical context
is not reprocessed, and whether a trigger arrived while it was held so
the trigger can be replayed on release.
"""

from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Iterable

from ..engine_core.action import PendingAction
from ..engine_core.state import GameContext


def batch_signature(
    actions: Iterable[PendingAction], context: GameContext
) -> tuple:
    """Queue ids plus the counters that decide which moves are allowed."""
    return (
        tuple(a.id for a in actions),
        context.phase,
        context.turn,
        context.round,
    )


class ProcessingLeases:
    """Per-game locks, last-batch signatures and deferred triggers."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._signatures: dict[str, tuple] = {}
        self._deferred: set[str] = set()
        self._release_listeners: list[Callable[[str], None]] = []

    def is_held(self, game_id: str) -> bool:
        lock = self._locks.get(game_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, game_id: str) -> AsyncIterator[None]:
        """
        Wait for and hold the game's lease.

        On release, listeners are called if a trigger was deferred while
        the lease was held.
        """
        lock = self._locks.setdefault(game_id, asyncio.Lock())
        try:
            async with lock:
                yield
        finally:
            if game_id in self._deferred:
                self._deferred.discard(game_id)
                for listener in list(self._release_listeners):
                    listener(game_id)

    def defer(self, game_id: str):
        """Remember that work arrived while the lease was held."""
        self._deferred.add(game_id)

    def is_deferred(self, game_id: str) -> bool:
        return game_id in self._deferred

    def on_release(self, listener: Callable[[str], None]):
        """Call `listener(game_id)` when a lease with deferred work is released."""
        self._release_listeners.append(listener)

    def seen(self, game_id: str, signature: tuple) -> bool:
        return self._signatures.get(game_id) == signature

    def record(self, game_id: str, signature: tuple):
        self._signatures[game_id] = signature

    def release(self, game_id: str):
        """Forget a game entirely (e.g. once it has ended)."""
        if not self.is_held(game_id):
            self._locks.pop(game_id, None)
        self._signatures.pop(game_id, None)
        self._deferred.discard(game_id)
