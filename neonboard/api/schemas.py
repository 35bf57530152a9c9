"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients (board screens and
participant devices) and the board controller.

Error Codes:
- GAME_NOT_FOUND: No game with that id or join code
- GAME_NOT_JOINABLE: Game has ended
- NOT_BOARD: Board-only operation called by someone else
- UNKNOWN_GAME_TYPE: No built-in game with that name
- INVALID_CONFIG: Game config failed validation
- PROTECTED_FIELD: Write touched engine-controlled fields
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class GameStatusName(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


class RoleName(str, Enum):
    BOARD = "board"
    PLAYER = "player"


class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    GAME_NOT_JOINABLE = "GAME_NOT_JOINABLE"
    NOT_BOARD = "NOT_BOARD"
    UNKNOWN_GAME_TYPE = "UNKNOWN_GAME_TYPE"
    INVALID_CONFIG = "INVALID_CONFIG"
    PROTECTED_FIELD = "PROTECTED_FIELD"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ContextInfo(BaseModel):
    """Engine context for display and client-side rules."""
    turn: int
    round: int
    phase: str
    status: GameStatusName
    turn_order: list[str] = Field(default_factory=list)
    current_player_index: int = 0
    current_player_id: Optional[str] = None
    phases: Optional[list[str]] = None


class FaultInfo(BaseModel):
    """A reducer or hook that failed (prior state kept)."""
    source: str
    error: str
    error_type: str
    action_id: Optional[str] = None

    model_config = {"from_attributes": True}


class RejectionInfo(BaseModel):
    """A queued action left in the queue."""
    action_id: str
    action_type: str
    reason: str = Field(description="not_allowed, no_reducer, reducer_fault")
    detail: Optional[str] = None


# =============================================================================
# Requests
# =============================================================================

class CreateGameRequest(BaseModel):
    game_type: str = Field(default="counter", description="Built-in game name")
    board_id: str
    join_code: Optional[str] = None
    turn_order: Optional[list[str]] = None
    meta: Optional[dict[str, Any]] = None


class JoinGameRequest(BaseModel):
    join_code: str
    player_id: str


class SubmitActionRequest(BaseModel):
    player_id: str
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class BoardRequest(BaseModel):
    """Any board-only operation: the caller must be the game's board."""
    board_id: str


class EndPhaseRequest(BoardRequest):
    target: Optional[str] = Field(default=None, description="Jump to this phase")


class SetPhaseRequest(BoardRequest):
    phase: str


class SetTurnOrderRequest(BoardRequest):
    turn_order: list[str]


class SetStatusRequest(BoardRequest):
    status: GameStatusName


class UpdateStateRequest(BaseModel):
    """Only fields that are present are written."""
    state: Optional[Any] = None
    meta: Optional[dict[str, Any]] = None


# =============================================================================
# Responses
# =============================================================================

class SnapshotResponse(BaseModel):
    game_id: str
    state: Any
    context: ContextInfo
    meta: Optional[dict[str, Any]] = None
    board_id: Optional[str] = None
    player_ids: list[str] = Field(default_factory=list)


class CreateGameResponse(BaseModel):
    game_id: str
    join_code: str
    role: RoleName = RoleName.BOARD


class JoinGameResponse(BaseModel):
    game_id: str
    join_code: str
    role: RoleName
    player_id: str


class SubmitActionResponse(BaseModel):
    game_id: str
    action_id: str


class ProcessResponse(BaseModel):
    game_id: str
    processed: bool = Field(description="False when the batch was skipped")
    consumed_ids: list[str] = Field(default_factory=list)
    rejected: list[RejectionInfo] = Field(default_factory=list)
    faults: list[FaultInfo] = Field(default_factory=list)
    snapshot: SnapshotResponse


class TransitionResponse(BaseModel):
    game_id: str
    advanced: bool
    updates: dict[str, Any] = Field(default_factory=dict)
    faults: list[FaultInfo] = Field(default_factory=list)
    snapshot: SnapshotResponse


class AllowedMovesResponse(BaseModel):
    game_id: str
    phase: str
    moves: list[str]


class ErrorResponse(BaseModel):
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
