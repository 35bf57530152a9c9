"""
Runtime settings read from the environment.

    NEONBOARD_ENV            development | production
    NEONBOARD_LOG_LEVEL      root log level (default INFO)
    NEONBOARD_SESSION_DIR    where stored sessions are kept
    NEONBOARD_PENDING_LIMIT  max queued actions read per batch
    ALLOWED_ORIGINS          comma-separated CORS origins for the API
"""

from __future__ import annotations
import logging
import os
from pathlib import Path

NEONBOARD_ENV = os.getenv("NEONBOARD_ENV", "development")
NEONBOARD_LOG_LEVEL = os.getenv("NEONBOARD_LOG_LEVEL", "INFO").upper()
NEONBOARD_SESSION_DIR = Path(
    os.getenv("NEONBOARD_SESSION_DIR", str(Path.home() / ".neonboard" / "sessions"))
)
NEONBOARD_PENDING_LIMIT = int(os.getenv("NEONBOARD_PENDING_LIMIT", "100"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

SESSION_MAX_AGE_SECONDS = 7 * 24 * 60 * 60
DEFAULT_PHASE = "default"
DEFAULT_JOIN_CODE_LENGTH = 6

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None):
    """Configure root logging once for CLI and server entry points."""
    logging.basicConfig(
        level=getattr(logging, (level or NEONBOARD_LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
