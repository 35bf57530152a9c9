"""
API Module - HTTP interface for boards and participants.

Exposes the board controller via REST:
1. A board creates a game and shares the join code
2. Participants join and queue actions
3. The board applies the queue and advances turns and phases
4. Everyone polls the snapshot

Games live in the process's in-memory store unless a controller with
another GameStore is passed to create_app.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    JoinGameRequest,
    SubmitActionRequest,
    BoardRequest,
    EndPhaseRequest,
    # Responses
    SnapshotResponse,
    ProcessResponse,
    TransitionResponse,
    ErrorResponse,
    ErrorCode,
)
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "JoinGameRequest",
    "SubmitActionRequest",
    "BoardRequest",
    "EndPhaseRequest",
    # Responses
    "SnapshotResponse",
    "ProcessResponse",
    "TransitionResponse",
    "ErrorResponse",
    "ErrorCode",
    "create_app",
]
