"""
Pytest fixtures for Neon Board tests.
"""

import pytest

from ..config_schema import GameConfig, PhaseDefinition
from ..engine_core.action import PendingAction
from ..engine_core.state import GameContext
from ..games import create_counter_config, create_poker_config
from ..session import BoardController
from ..store import InMemoryGameStore


@pytest.fixture
def counter_config() -> GameConfig:
    """Single-phase counter game."""
    return create_counter_config()


@pytest.fixture
def poker_config() -> GameConfig:
    """Four-phase poker loop: bet -> deal -> act -> resolve."""
    return create_poker_config()


@pytest.fixture
def poker_context() -> GameContext:
    """Poker context in the betting phase with three players."""
    return GameContext(
        phase="bet",
        turn_order=("p1", "p2", "p3"),
        phases=("bet", "deal", "act", "resolve"),
    )


@pytest.fixture
def make_action():
    """Factory for queued actions with increasing timestamps."""
    counter = {"n": 0}

    def _make(action_type, payload=None, player_id="p1", created_at=None):
        counter["n"] += 1
        return PendingAction(
            id=f"a{counter['n']}",
            type=action_type,
            payload=payload or {},
            player_id=player_id,
            created_at=created_at if created_at is not None else float(counter["n"]),
        )

    return _make


@pytest.fixture
def recording_config() -> GameConfig:
    """Config whose hooks append (label, phase, turn) to state["log"]."""

    def record(label):
        def hook(state, payload, ctx):
            return {**state, "log": [*state["log"], (label, ctx.phase, ctx.turn)]}
        return hook

    return GameConfig(
        name="recording",
        phases=(
            PhaseDefinition(name="a", start=True, on_begin=record("a:begin"), on_end=record("a:end"), next="b"),
            PhaseDefinition(name="b", on_begin=record("b:begin"), on_end=record("b:end"), next="a"),
        ),
    )


@pytest.fixture
def store() -> InMemoryGameStore:
    return InMemoryGameStore()


@pytest.fixture
def controller(store) -> BoardController:
    return BoardController(store)
