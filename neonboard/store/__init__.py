"""
Store Module - Where game documents and pending actions live.

The engine never talks to storage itself; the board controller reads a
snapshot, asks the engine for the next values, then writes them back
through a GameStore.
"""

from .base import (
    GameStore,
    GameDocument,
    NeonBoardError,
    GameNotFoundError,
    GameNotJoinableError,
    ProtectedFieldError,
    ENGINE_FIELDS,
)
from .memory import InMemoryGameStore
from .codes import generate_join_code, JOIN_CODE_ALPHABET

__all__ = [
    "GameStore",
    "GameDocument",
    "NeonBoardError",
    "GameNotFoundError",
    "GameNotJoinableError",
    "ProtectedFieldError",
    "ENGINE_FIELDS",
    "InMemoryGameStore",
    "generate_join_code",
    "JOIN_CODE_ALPHABET",
]
