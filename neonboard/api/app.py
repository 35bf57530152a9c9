"""
FastAPI Application - REST API for board screens and participant devices.

Endpoints:
    POST   /api/v1/games                          Create a game (caller is the board)
    POST   /api/v1/games/join                     Join by code
    GET    /api/v1/games/{id}                     Get snapshot
    PUT    /api/v1/games/{id}/state               Write state and/or meta
    GET    /api/v1/games/{id}/moves               Moves allowed in the current phase
    POST   /api/v1/games/{id}/actions             Queue an action
    POST   /api/v1/games/{id}/process             Apply the queue (board only)
    POST   /api/v1/games/{id}/end-turn            Advance the turn (board only)
    POST   /api/v1/games/{id}/end-phase           Advance the phase (board only)
    POST   /api/v1/games/{id}/phase               Set the phase (board only)
    POST   /api/v1/games/{id}/turn-order          Replace turn order (board only)
    POST   /api/v1/games/{id}/status              Set status (board only)

Processing Flow:
    1. Participants POST /actions; actions are queued, never applied inline
    2. The board POSTs /process; the batch is applied with one write
    3. Actions that were not allowed or whose reducer failed stay queued

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config_schema import ConfigValidationError
from ..engine_core.action import BatchResult, ReducerFault, Transition
from ..engine_core.state import GameSnapshot
from ..games import get_game_config
from ..session.board import BoardController, CreateGameOptions, NotBoardError
from ..settings import ALLOWED_ORIGINS
from ..store.base import (
    GameNotFoundError,
    GameNotJoinableError,
    NeonBoardError,
    ProtectedFieldError,
)
from ..store.memory import InMemoryGameStore
from .schemas import (
    # Request models
    CreateGameRequest,
    JoinGameRequest,
    SubmitActionRequest,
    BoardRequest,
    EndPhaseRequest,
    SetPhaseRequest,
    SetTurnOrderRequest,
    SetStatusRequest,
    UpdateStateRequest,
    # Response models
    SnapshotResponse,
    CreateGameResponse,
    JoinGameResponse,
    SubmitActionResponse,
    ProcessResponse,
    TransitionResponse,
    AllowedMovesResponse,
    ErrorResponse,
    HealthResponse,
    # Nested models
    ContextInfo,
    FaultInfo,
    RejectionInfo,
    # Enums
    ErrorCode,
)


def create_app(controller: Optional[BoardController] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        controller: Optional BoardController (in-memory store if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Neon Board API",
        description="""
Game-state transition engine for shared-screen party games.

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | No game with that id or join code |
| `GAME_NOT_JOINABLE` | Game has ended |
| `NOT_BOARD` | Board-only operation called by someone else |
| `UNKNOWN_GAME_TYPE` | No built-in game with that name |
| `INVALID_CONFIG` | Game config failed validation |
| `PROTECTED_FIELD` | Write touched engine-controlled fields |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    board = controller or BoardController(InMemoryGameStore())
    app.state.controller = board

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(NeonBoardError)
    async def handle_engine_error(request, exc: NeonBoardError) -> JSONResponse:
        if isinstance(exc, GameNotFoundError):
            return make_error_response(ErrorCode.GAME_NOT_FOUND, str(exc), 404, {"key": exc.key})
        if isinstance(exc, GameNotJoinableError):
            return make_error_response(
                ErrorCode.GAME_NOT_JOINABLE, str(exc), 409, {"status": exc.status.value}
            )
        if isinstance(exc, NotBoardError):
            return make_error_response(ErrorCode.NOT_BOARD, str(exc), 403)
        if isinstance(exc, ProtectedFieldError):
            return make_error_response(
                ErrorCode.PROTECTED_FIELD, str(exc), 400, {"fields": exc.fields}
            )
        return make_error_response(ErrorCode.INTERNAL_ERROR, str(exc), 500)

    @app.exception_handler(ConfigValidationError)
    async def handle_config_error(request, exc: ConfigValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.INVALID_CONFIG, str(exc), 400, {"errors": exc.errors}
        )

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=CreateGameResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown game type"}},
        tags=["Games"],
        summary="Create a new game",
    )
    async def create_game(request: CreateGameRequest):
        """
        Create a game from a built-in configuration.

        The caller (`board_id`) becomes the board. Phases and the initial
        phase come from the config; status starts as "waiting".
        """
        try:
            config = get_game_config(request.game_type)
        except KeyError as e:
            return make_error_response(ErrorCode.UNKNOWN_GAME_TYPE, e.args[0])

        created = await board.create_game(
            request.board_id,
            config=config,
            options=CreateGameOptions(
                join_code=request.join_code,
                turn_order=request.turn_order,
                meta=request.meta,
            ),
        )
        return CreateGameResponse(
            game_id=created.game_id,
            join_code=created.join_code,
            role=created.role.value,
        )

    @app.post(
        "/api/v1/games/join",
        response_model=JoinGameResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Join a game by code",
    )
    async def join_game(request: JoinGameRequest) -> JoinGameResponse:
        joined = await board.join_game(request.join_code, request.player_id)
        return JoinGameResponse(
            game_id=joined.game_id,
            join_code=joined.join_code,
            role=joined.role.value,
            player_id=joined.player_id,
        )

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get the game snapshot",
    )
    async def get_game(game_id: str) -> SnapshotResponse:
        return _convert_snapshot(game_id, await board.get_snapshot(game_id))

    @app.put(
        "/api/v1/games/{game_id}/state",
        response_model=SnapshotResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Write state and/or meta",
    )
    async def update_state(game_id: str, request: UpdateStateRequest) -> SnapshotResponse:
        """Only fields present in the body are written; engine fields never are."""
        fields = {name: getattr(request, name) for name in request.model_fields_set}
        await board.get_snapshot(game_id)
        await board.update_game_state(game_id, **fields)
        return _convert_snapshot(game_id, await board.get_snapshot(game_id))

    @app.get(
        "/api/v1/games/{game_id}/moves",
        response_model=AllowedMovesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Moves allowed in the current phase",
    )
    async def get_allowed_moves(game_id: str) -> AllowedMovesResponse:
        snapshot = await board.get_snapshot(game_id)
        return AllowedMovesResponse(
            game_id=game_id,
            phase=snapshot.context.phase,
            moves=await board.allowed_moves(game_id),
        )

    # =========================================================================
    # Action Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/actions",
        response_model=SubmitActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Actions"],
        summary="Queue an action",
    )
    async def submit_action(game_id: str, request: SubmitActionRequest) -> SubmitActionResponse:
        """
        Queue an action for the board.

        Actions are never applied here; the board applies the queue.
        """
        action_id = await board.submit_action(
            game_id, request.player_id, request.type, request.payload
        )
        return SubmitActionResponse(game_id=game_id, action_id=action_id)

    @app.post(
        "/api/v1/games/{game_id}/process",
        response_model=ProcessResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Board"],
        summary="Apply the queued actions",
    )
    async def process_pending(game_id: str, request: BoardRequest) -> ProcessResponse:
        result = await board.process_pending(game_id, request.board_id)
        snapshot = await board.get_snapshot(game_id)
        return _convert_batch(game_id, result, snapshot)

    @app.post(
        "/api/v1/games/{game_id}/end-turn",
        response_model=TransitionResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Board"],
        summary="Advance to the next turn",
    )
    async def end_turn(game_id: str, request: BoardRequest) -> TransitionResponse:
        transition = await board.end_turn(game_id, request.board_id)
        return _convert_transition(game_id, transition, await board.get_snapshot(game_id))

    @app.post(
        "/api/v1/games/{game_id}/end-phase",
        response_model=TransitionResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Board"],
        summary="Advance to the next (or a given) phase",
    )
    async def end_phase(game_id: str, request: EndPhaseRequest) -> TransitionResponse:
        """
        Advance the phase.

        Without `target`, moves along the derived phase order; wrapping
        to the first phase increments the round. `advanced` is false
        when the game has no phase order.
        """
        transition = await board.end_phase(game_id, request.board_id, request.target)
        return _convert_transition(game_id, transition, await board.get_snapshot(game_id))

    @app.post(
        "/api/v1/games/{game_id}/phase",
        response_model=SnapshotResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Board"],
        summary="Set the phase directly",
    )
    async def set_phase(game_id: str, request: SetPhaseRequest) -> SnapshotResponse:
        await board.set_phase(game_id, request.board_id, request.phase)
        return _convert_snapshot(game_id, await board.get_snapshot(game_id))

    @app.post(
        "/api/v1/games/{game_id}/turn-order",
        response_model=SnapshotResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Board"],
        summary="Replace the turn order",
    )
    async def set_turn_order(game_id: str, request: SetTurnOrderRequest) -> SnapshotResponse:
        await board.set_turn_order(game_id, request.board_id, request.turn_order)
        return _convert_snapshot(game_id, await board.get_snapshot(game_id))

    @app.post(
        "/api/v1/games/{game_id}/status",
        response_model=SnapshotResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Board"],
        summary="Set the game status",
    )
    async def set_status(game_id: str, request: SetStatusRequest) -> SnapshotResponse:
        await board.set_status(game_id, request.board_id, request.status.value)
        return _convert_snapshot(game_id, await board.get_snapshot(game_id))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="neonboard",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Neon Board API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _convert_snapshot(game_id: str, snapshot: GameSnapshot) -> SnapshotResponse:
        return SnapshotResponse(
            game_id=game_id,
            state=snapshot.state,
            context=ContextInfo(**snapshot.context.to_dict()),
            meta=snapshot.meta,
            board_id=snapshot.board_id,
            player_ids=snapshot.player_ids,
        )

    def _convert_faults(faults: list[ReducerFault]) -> list[FaultInfo]:
        return [FaultInfo.model_validate(fault) for fault in faults]

    def _convert_batch(
        game_id: str,
        result: Optional[BatchResult],
        snapshot: GameSnapshot,
    ) -> ProcessResponse:
        if result is None:
            return ProcessResponse(
                game_id=game_id,
                processed=False,
                snapshot=_convert_snapshot(game_id, snapshot),
            )
        return ProcessResponse(
            game_id=game_id,
            processed=True,
            consumed_ids=result.consumed_ids,
            rejected=[
                RejectionInfo(
                    action_id=rejection.action_id,
                    action_type=rejection.action_type,
                    reason=rejection.reason.value,
                    detail=rejection.detail,
                )
                for rejection in result.rejected
            ],
            faults=_convert_faults(result.faults),
            snapshot=_convert_snapshot(game_id, snapshot),
        )

    def _convert_transition(
        game_id: str,
        transition: Optional[Transition],
        snapshot: GameSnapshot,
    ) -> TransitionResponse:
        if transition is None:
            return TransitionResponse(
                game_id=game_id,
                advanced=False,
                snapshot=_convert_snapshot(game_id, snapshot),
            )
        return TransitionResponse(
            game_id=game_id,
            advanced=True,
            updates=transition.updates,
            faults=_convert_faults(transition.faults),
            snapshot=_convert_snapshot(game_id, snapshot),
        )

    return app


# For running directly: uvicorn neonboard.api.app:app
app = create_app()
