"""
Session Module - The board side of a running game.

A board controller:
- Creates games and lets participants join by code
- Applies queued actions as single batches
- Ends turns and phases on request
- Remembers the last session for reconnection

The engine itself is pure; everything here is sequencing and I/O.
"""

from .board import (
    BoardController,
    CreateGameOptions,
    CreateGameResult,
    JoinGameResult,
    NotBoardError,
)
from .leases import ProcessingLeases, batch_signature
from .reconnect import Role, SessionStore, StoredSession

__all__ = [
    "BoardController",
    "CreateGameOptions",
    "CreateGameResult",
    "JoinGameResult",
    "NotBoardError",
    "ProcessingLeases",
    "batch_signature",
    "Role",
    "SessionStore",
    "StoredSession",
]
