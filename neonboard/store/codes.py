"""Join codes - short, readable room codes."""

from __future__ import annotations
import secrets

from ..settings import DEFAULT_JOIN_CODE_LENGTH

# No ambiguous 0/O, 1/I
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_join_code(length: int = DEFAULT_JOIN_CODE_LENGTH) -> str:
    """Generate a join code of `length` characters from JOIN_CODE_ALPHABET."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_join_code(code: str) -> str:
    return code.strip().upper()
