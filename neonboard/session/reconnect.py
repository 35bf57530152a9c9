"""
Session Store - Remembers the last joined game for reconnection.

The store:
- Keeps one JSON file per device (the last session)
- Expires sessions after SESSION_MAX_AGE_SECONDS
- Treats unreadable files as "no session"
- Keeps a persistent board id for board-only devices

Persistence here is best-effort: a failed write is logged, never raised.
"""

from __future__ import annotations
import json
import logging
import time
import uuid
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path

from ..settings import NEONBOARD_SESSION_DIR, SESSION_MAX_AGE_SECONDS

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"
BOARD_ID_FILE = "board_id"


class Role(Enum):
    """
    Role in a game.
    - board: single source of truth; applies actions and writes state
    - player: submits actions for the board to apply
    """
    BOARD = "board"
    PLAYER = "player"


@dataclass
class StoredSession:
    """A session saved for reconnection."""
    game_id: str
    join_code: str
    role: Role
    player_id: str
    stored_at: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> StoredSession:
        return cls(
            game_id=data["game_id"],
            join_code=data["join_code"],
            role=Role(data["role"]),
            player_id=data["player_id"],
            stored_at=float(data.get("stored_at", 0.0)),
        )


class SessionStore:
    """
    File-based store for the last session.

    Usage:
        sessions = SessionStore(session_dir="~/.neonboard/sessions")
        sessions.save(StoredSession(game_id, code, Role.PLAYER, "p1"))

        # On next start
        session = sessions.load()
        if session:
            rejoin(session)
    """

    def __init__(
        self,
        session_dir: str | Path | None = None,
        max_age_seconds: float = SESSION_MAX_AGE_SECONDS,
    ):
        self.session_dir = Path(session_dir or NEONBOARD_SESSION_DIR).expanduser()
        self.max_age_seconds = max_age_seconds

    @property
    def session_path(self) -> Path:
        return self.session_dir / SESSION_FILE

    def save(self, session: StoredSession):
        """Save a session, stamping stored_at with the current time."""
        session.stored_at = time.time()
        try:
            self.session_dir.mkdir(parents=True, exist_ok=True)
            with open(self.session_path, "w") as f:
                json.dump(session.to_dict(), f, indent=2)
        except OSError as e:
            logger.warning("Could not save session to %s: %s", self.session_path, e)

    def load(self) -> StoredSession | None:
        """
        Load the stored session.

        Returns None if none is stored, it is unreadable, or it expired.
        """
        if not self.session_path.exists():
            return None

        try:
            with open(self.session_path) as f:
                session = StoredSession.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable session file: %s", e)
            self.clear()
            return None

        if time.time() - session.stored_at > self.max_age_seconds:
            logger.info("Stored session for game %s expired", session.game_id)
            self.clear()
            return None

        return session

    def clear(self):
        """Forget the stored session."""
        self.session_path.unlink(missing_ok=True)

    def get_or_create_board_id(self) -> str:
        """
        Persistent board id for this device.

        Falls back to a fresh id (not persisted) if the directory is not writable.
        """
        path = self.session_dir / BOARD_ID_FILE
        try:
            if path.exists():
                board_id = path.read_text().strip()
                if board_id:
                    return board_id
            board_id = str(uuid.uuid4())
            self.session_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(board_id)
            return board_id
        except OSError as e:
            logger.warning("Board id not persisted: %s", e)
            return str(uuid.uuid4())
