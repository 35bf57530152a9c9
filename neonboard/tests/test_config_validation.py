"""
Tests for game config building and validation.

Tests:
- Built-in games are valid
- Structural errors (duplicates, start flags, non-callables)
- Phase chain warnings
- Building configs from plain mappings
"""

import pytest

from ..config_schema import (
    ConfigValidationError,
    GameConfig,
    PhaseDefinition,
    TurnHooks,
    load_config,
    validate_config,
)
from ..games import GAMES, get_game_config


def _noop(state, payload, ctx):
    return state


class TestBuiltInGames:

    @pytest.mark.parametrize("name", sorted(GAMES))
    def test_valid(self, name):
        result = validate_config(get_game_config(name))

        assert result.valid, result.errors
        assert result.warnings == []

    def test_unknown_game(self):
        with pytest.raises(KeyError, match="Available"):
            get_game_config("chess")


class TestErrors:

    def test_duplicate_phase(self):
        config = GameConfig(phases=(PhaseDefinition("a"), PhaseDefinition("a")))
        result = validate_config(config)

        assert not result.valid
        assert "Duplicate phase 'a'" in result.errors

    def test_several_start_phases(self):
        config = GameConfig(
            phases=(PhaseDefinition("a", start=True), PhaseDefinition("b", start=True)),
        )
        result = validate_config(config)

        assert not result.valid
        assert any("start=True" in e for e in result.errors)

    def test_non_callable_move(self):
        config = GameConfig(moves={"draw": "draw"})
        assert "Global move 'draw' is not callable" in validate_config(config).errors

    def test_non_callable_phase_hook(self):
        config = GameConfig(phases=(PhaseDefinition("a", on_begin=42),))
        assert "Phase 'a': on_begin is not callable" in validate_config(config).errors

    def test_non_callable_turn_hook(self):
        config = GameConfig(turns=TurnHooks(on_end="later"))
        assert "turns.on_end is not callable" in validate_config(config).errors

    def test_empty_phase_name(self):
        config = GameConfig(phases=(PhaseDefinition(""),))
        assert "Phase has empty name" in validate_config(config).errors


class TestWarnings:

    def test_dangling_next(self):
        config = GameConfig(phases=(PhaseDefinition("a", next="b"),))
        result = validate_config(config)

        assert result.valid
        assert "Phase 'a' points at unknown phase 'b'" in result.warnings

    def test_unreachable_phase(self):
        config = GameConfig(phases=(PhaseDefinition("a", start=True), PhaseDefinition("b")))
        assert "Phase 'b' is not reachable from 'a'" in validate_config(config).warnings

    def test_loop_to_middle(self):
        config = GameConfig(
            phases=(
                PhaseDefinition("a", next="b"),
                PhaseDefinition("b", next="c"),
                PhaseDefinition("c", next="b"),
            ),
        )
        assert any("loops back to 'b'" in w for w in validate_config(config).warnings)

    def test_shadowed_move(self):
        config = GameConfig(
            moves={"pass": _noop},
            phases=(PhaseDefinition("a", moves={"pass": _noop}),),
        )
        assert any("shadows" in w for w in validate_config(config).warnings)

    def test_no_phases(self):
        result = validate_config(GameConfig())

        assert result.valid
        assert any("No phases" in w for w in result.warnings)


class TestLoadConfig:

    def test_strict_raises(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config({"moves": {"draw": None}})
        assert exc_info.value.errors == ["Global move 'draw' is not callable"]

    def test_lenient_returns_config(self):
        config = load_config({"moves": {"draw": None}}, strict=False)
        assert "draw" in config.moves

    def test_from_mapping_of_phases(self):
        config = load_config({
            "name": "quiz",
            "phases": {
                "lobby": {"start": True, "next": "question"},
                "question": {"onBegin": _noop, "moves": {"answer": _noop}, "next": "lobby"},
            },
            "turns": {"onEnd": _noop},
        })

        assert config.phase_names == ["lobby", "question"]
        assert config.get_phase("lobby").start is True
        assert config.get_phase("question").on_begin is _noop
        assert config.turns.on_end is _noop

    def test_from_list_of_phases(self):
        config = GameConfig.from_dict({
            "phases": [
                {"name": "a", "next": "b"},
                PhaseDefinition("b"),
            ],
        })
        assert config.phase_names == ["a", "b"]
        assert config.get_phase("a").next == "b"

    def test_truthy_start_is_not_start(self):
        phase = PhaseDefinition.from_dict("a", {"start": "yes"})
        assert phase.start is False
