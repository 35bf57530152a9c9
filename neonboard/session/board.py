"""
Board Controller - The authoritative process for a set of games.

LIFECYCLE:
1. Board creates a game -> phases and initial phase derived from config,
   setup() produces the initial state, status "waiting"
2. Participants join by code -> appended to player ids and turn order,
   status "active"
3. During play:
   - Participants queue actions
   - Board processes the queue (one batch, one write, then deletes)
   - Board ends turns and phases when its own rules say so
4. Board sets status "ended"

WRITE ORDER (per batch):
    read queue -> compute -> write state -> delete consumed actions

If the host dies between the write and the deletes, those actions are
applied again on the next batch; reducers are not required to be
idempotent.
"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable

from ..config_schema import GameConfig, load_config
from ..engine_core.action import BatchResult, Transition
from ..engine_core.phase_graph import derive_initial_phase, derive_ordered_phases
from ..engine_core.phases import advance_phase
from ..engine_core.processor import ActionProcessor
from ..engine_core.state import GameSnapshot, GameStatus, SetupContext
from ..engine_core.turns import advance_turn
from ..settings import DEFAULT_PHASE, NEONBOARD_PENDING_LIMIT
from ..store.base import (
    GameDocument,
    GameNotFoundError,
    GameNotJoinableError,
    GameStore,
    NeonBoardError,
    Unsubscribe,
)
from ..store.codes import generate_join_code, normalize_join_code
from .leases import ProcessingLeases, batch_signature
from .reconnect import Role, SessionStore, StoredSession

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class NotBoardError(NeonBoardError):
    """A board-only operation was called by someone other than the board."""

    def __init__(self, game_id: str, caller_id: str):
        self.game_id = game_id
        self.caller_id = caller_id
        super().__init__(f"{caller_id} is not the board of game {game_id}")


@dataclass
class CreateGameOptions:
    """Options when creating a game without (or on top of) a GameConfig."""
    join_code: str | None = None
    initial_state: Any = None
    initial_phase: str | None = None
    phases: list[str] | None = None  # Used only when no config is given
    turn_order: list[str] | None = None
    meta: dict[str, Any] | None = None


@dataclass
class CreateGameResult:
    game_id: str
    join_code: str
    role: Role = Role.BOARD


@dataclass
class JoinGameResult:
    game_id: str
    join_code: str
    role: Role
    player_id: str


class BoardController:
    """
    Runs engine operations against a GameStore.

    Responsibilities:
    - Create and join games
    - Hold the config (and its prebuilt processor) per game
    - Serialize mutating operations per game through ProcessingLeases
    - Enforce that only the board mutates engine fields

    Usage:
        controller = BoardController(InMemoryGameStore())
        created = await controller.create_game("tv", config=counter_config())
        await controller.join_game(created.join_code, "p1")
        await controller.submit_action(created.game_id, "p1", "increment", {"amount": 2})
        await controller.process_pending(created.game_id, "tv")
    """

    def __init__(
        self,
        store: GameStore,
        session_store: SessionStore | None = None,
        leases: ProcessingLeases | None = None,
        pending_limit: int = NEONBOARD_PENDING_LIMIT,
    ):
        self.store = store
        self.session_store = session_store
        self.leases = leases or ProcessingLeases()
        self.pending_limit = pending_limit
        self._configs: dict[str, GameConfig] = {}
        self._processors: dict[str, ActionProcessor] = {}
        self._watchers: dict[str, str] = {}
        self._drain_tasks: set[asyncio.Task] = set()
        self.leases.on_release(self._on_lease_released)

    # =========================================================================
    # Configs
    # =========================================================================

    def register_config(self, game_id: str, config: GameConfig, validate: bool = True):
        """Attach a config to a game (e.g. after a board restart)."""
        if validate:
            config = load_config(config)
        self._configs[game_id] = config
        self._processors[game_id] = ActionProcessor(config)

    def config_for(self, game_id: str) -> GameConfig | None:
        return self._configs.get(game_id)

    # =========================================================================
    # Create / join
    # =========================================================================

    async def create_game(
        self,
        board_id: str,
        config: GameConfig | None = None,
        options: CreateGameOptions | None = None,
    ) -> CreateGameResult:
        """
        Create a new game. The caller becomes the board.

        With a config, phases come from the phase graph and setup()
        produces the initial state; otherwise options are used as given.
        """
        options = options or CreateGameOptions()
        turn_order = list(options.turn_order or [])
        initial_state = options.initial_state

        if config is not None:
            config = load_config(config)
            phases = derive_ordered_phases(config)
            initial_phase = derive_initial_phase(config)
            if config.setup is not None:
                initial_state = config.setup(
                    SetupContext(
                        phase=initial_phase,
                        status=GameStatus.WAITING,
                        turn_order=tuple(turn_order),
                    )
                )
        else:
            phases = list(options.phases or [])
            initial_phase = options.initial_phase
            if initial_phase is None:
                initial_phase = phases[0] if phases else DEFAULT_PHASE

        join_code = normalize_join_code(options.join_code or generate_join_code())
        document = GameDocument(
            join_code=join_code,
            board_id=board_id,
            player_ids=[],
            meta=options.meta,
            created_at=time.time(),
            status=GameStatus.WAITING,
            state=initial_state if initial_state is not None else {},
            phase=initial_phase,
            turn_order=turn_order,
            phases=phases or None,
        )
        game_id = await self.store.create_game(document)
        if config is not None:
            self.register_config(game_id, config, validate=False)

        logger.info("Created game %s (code %s, phase '%s')", game_id, join_code, initial_phase)
        self._save_session(game_id, join_code, Role.BOARD, board_id)
        return CreateGameResult(game_id=game_id, join_code=join_code)

    async def join_game(
        self,
        join_code: str,
        player_id: str,
        as_board: bool | None = None,
    ) -> JoinGameResult:
        """
        Join a game by code.

        Rejoining returns the existing role. The first joiner becomes the
        board when none is set. Joiners are appended to the turn order.
        """
        found = await self.store.find_by_join_code(join_code)
        if found is None:
            raise GameNotFoundError(normalize_join_code(join_code))
        game_id, document = found

        if document.status not in {GameStatus.WAITING, GameStatus.ACTIVE}:
            raise GameNotJoinableError(game_id, document.status)

        if player_id in document.player_ids or document.board_id == player_id:
            role = Role.BOARD if document.board_id == player_id else Role.PLAYER
        else:
            is_board = as_board if as_board is not None else not document.board_id
            updates: dict[str, Any] = {
                "player_ids": [*document.player_ids, player_id],
                "status": GameStatus.ACTIVE,
            }
            if is_board:
                updates["board_id"] = player_id
            if player_id not in document.turn_order:
                updates["turn_order"] = [*document.turn_order, player_id]
            await self.store.merge_game(game_id, updates)
            role = Role.BOARD if is_board else Role.PLAYER
            logger.info("%s joined game %s as %s", player_id, game_id, role.value)

        self._save_session(game_id, document.join_code, role, player_id)
        return JoinGameResult(
            game_id=game_id,
            join_code=document.join_code,
            role=role,
            player_id=player_id,
        )

    def stored_session(self) -> StoredSession | None:
        """The last saved session, for "rejoin?" prompts."""
        return self.session_store.load() if self.session_store else None

    def leave_game(self):
        """Forget the stored session."""
        if self.session_store:
            self.session_store.clear()

    # =========================================================================
    # Reads and participant writes
    # =========================================================================

    async def get_snapshot(self, game_id: str) -> GameSnapshot:
        return (await self._require_game(game_id)).snapshot()

    async def allowed_moves(self, game_id: str) -> list[str]:
        """Moves the current phase accepts, for proactive UI hints."""
        document = await self._require_game(game_id)
        processor = self._processors.get(game_id)
        if processor is None:
            return []
        return sorted(processor.resolver.allowed_moves(document.phase))

    async def submit_action(
        self,
        game_id: str,
        player_id: str,
        action_type: str,
        payload: dict[str, Any] | None = None,
    ) -> str:
        """Queue an action for the board to apply."""
        await self._require_game(game_id)
        return await self.store.add_pending_action(game_id, player_id, action_type, payload or {})

    async def update_game_state(
        self,
        game_id: str,
        state: Any = _UNSET,
        meta: Any = _UNSET,
    ):
        """Write state and/or meta directly (never engine fields)."""
        updates: dict[str, Any] = {}
        if state is not _UNSET:
            updates["state"] = state
        if meta is not _UNSET:
            updates["meta"] = meta
        if updates:
            await self.store.update_game_state(game_id, updates)

    # =========================================================================
    # Board operations
    # =========================================================================

    async def process_pending(self, game_id: str, caller_id: str) -> BatchResult | None:
        """
        Apply the queued actions as one batch.

        Returns None when skipped: another operation holds the lease (the
        batch is deferred until release), the queue is empty, no config is
        registered, or this exact batch was already processed against this
        context.
        """
        if self.leases.is_held(game_id):
            logger.debug("Game %s is already processing; batch deferred", game_id)
            self.leases.defer(game_id)
            return None

        async with self.leases.hold(game_id):
            document = await self._require_board(game_id, caller_id)
            processor = self._processors.get(game_id)
            if processor is None:
                logger.warning("No config registered for game %s; actions will not be processed", game_id)
                return None

            actions = await self.store.list_pending_actions(game_id, self.pending_limit)
            if not actions:
                return None

            context = document.context()
            signature = batch_signature(actions, context)
            if self.leases.seen(game_id, signature):
                return None

            result = processor.process_batch(document.state, context, actions)
            if result.changed:
                await self.store.merge_game(game_id, result.document_update())
                for action_id in result.consumed_ids:
                    await self.store.delete_pending_action(game_id, action_id)

            self.leases.record(game_id, signature)
            return result

    async def end_turn(self, game_id: str, caller_id: str) -> Transition:
        """Advance to the next turn, running turns.on_end / turns.on_begin."""
        async with self.leases.hold(game_id):
            document = await self._require_board(game_id, caller_id)
            transition = advance_turn(self._configs.get(game_id), document.state, document.context())
            await self.store.merge_game(game_id, transition.document_update())
            return transition

    async def end_phase(
        self,
        game_id: str,
        caller_id: str,
        target: str | None = None,
    ) -> Transition | None:
        """
        Advance to `target`, or to the next phase of the derived order.

        Returns None (and writes nothing) when no advance is possible.
        """
        async with self.leases.hold(game_id):
            document = await self._require_board(game_id, caller_id)
            transition = advance_phase(
                self._configs.get(game_id), document.state, document.context(), target
            )
            if transition is None:
                return None
            await self.store.merge_game(game_id, transition.document_update())
            return transition

    async def set_phase(self, game_id: str, caller_id: str, phase: str):
        """Set the phase directly; no hooks, no round change."""
        async with self.leases.hold(game_id):
            await self._require_board(game_id, caller_id)
            await self.store.merge_game(game_id, {"phase": phase})

    async def set_turn_order(self, game_id: str, caller_id: str, turn_order: Iterable[str]):
        """Replace the turn order; the current player index resets to 0."""
        async with self.leases.hold(game_id):
            await self._require_board(game_id, caller_id)
            await self.store.merge_game(
                game_id, {"turn_order": list(turn_order), "current_player_index": 0}
            )

    async def set_status(self, game_id: str, caller_id: str, status: GameStatus | str):
        async with self.leases.hold(game_id):
            await self._require_board(game_id, caller_id)
            await self.store.merge_game(game_id, {"status": GameStatus.parse(status)})

    def watch(self, game_id: str, board_id: str) -> Unsubscribe:
        """
        Process the queue whenever it changes.

        Changes that arrive while the game's lease is held are replayed
        once the lease is released. Must be called from a running event
        loop. Returns an unsubscribe callable.
        """
        loop = asyncio.get_running_loop()
        self._watchers[game_id] = board_id

        def on_actions(actions):
            if not actions:
                return
            if self.leases.is_held(game_id):
                self.leases.defer(game_id)
            else:
                self._schedule_drain(loop, game_id, board_id)

        unsubscribe_actions = self.store.subscribe_actions(game_id, on_actions)

        def unsubscribe():
            unsubscribe_actions()
            if self._watchers.get(game_id) == board_id:
                del self._watchers[game_id]

        return unsubscribe

    def _on_lease_released(self, game_id: str):
        board_id = self._watchers.get(game_id)
        if board_id is not None:
            self._schedule_drain(asyncio.get_running_loop(), game_id, board_id)

    def _schedule_drain(self, loop: asyncio.AbstractEventLoop, game_id: str, board_id: str):
        task = loop.create_task(self._drain(game_id, board_id))
        self._drain_tasks.add(task)
        task.add_done_callback(self._drain_finished)

    def _drain_finished(self, task: asyncio.Task):
        self._drain_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Queue processing task failed", exc_info=error)

    async def _drain(self, game_id: str, board_id: str):
        # Keep going until a batch consumes nothing; a skipped batch is
        # deferred and replayed when the lease is released.
        try:
            while True:
                result = await self.process_pending(game_id, board_id)
                if result is None or not result.changed:
                    return
        except NeonBoardError as e:
            logger.error("Stopped processing game %s: %s", game_id, e)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _require_game(self, game_id: str) -> GameDocument:
        document = await self.store.get_game(game_id)
        if document is None:
            raise GameNotFoundError(game_id)
        return document

    async def _require_board(self, game_id: str, caller_id: str) -> GameDocument:
        document = await self._require_game(game_id)
        if document.board_id != caller_id:
            raise NotBoardError(game_id, caller_id)
        return document

    def _save_session(self, game_id: str, join_code: str, role: Role, player_id: str):
        if self.session_store:
            self.session_store.save(
                StoredSession(
                    game_id=game_id,
                    join_code=join_code,
                    role=role,
                    player_id=player_id,
                )
            )
