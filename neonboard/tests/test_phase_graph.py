"""
Tests for the phase graph.

Tests:
- Initial phase selection
- Ordered phase walk (linear, cyclic, dangling)
"""

from ..config_schema import GameConfig, PhaseDefinition
from ..engine_core.phase_graph import derive_initial_phase, derive_ordered_phases


def _config(*phases):
    return GameConfig(phases=tuple(phases))


class TestInitialPhase:

    def test_start_flag_wins(self):
        config = _config(PhaseDefinition("a"), PhaseDefinition("b", start=True))
        assert derive_initial_phase(config) == "b"

    def test_first_declared_without_start_flag(self):
        config = _config(PhaseDefinition("lobby"), PhaseDefinition("play"))
        assert derive_initial_phase(config) == "lobby"

    def test_first_start_flag_when_several(self):
        config = _config(
            PhaseDefinition("a"),
            PhaseDefinition("b", start=True),
            PhaseDefinition("c", start=True),
        )
        assert derive_initial_phase(config) == "b"

    def test_no_phases(self):
        assert derive_initial_phase(GameConfig()) == ""


class TestOrderedPhases:

    def test_poker_order(self, poker_config):
        assert derive_ordered_phases(poker_config) == ["bet", "deal", "act", "resolve"]

    def test_single_phase(self, counter_config):
        assert derive_ordered_phases(counter_config) == ["play"]

    def test_starts_from_flagged_phase(self):
        config = _config(
            PhaseDefinition("setup", next="main"),
            PhaseDefinition("main", start=True, next="score"),
            PhaseDefinition("score"),
        )
        assert derive_ordered_phases(config) == ["main", "score"]

    def test_stops_without_next(self):
        config = _config(PhaseDefinition("a"), PhaseDefinition("b"))
        assert derive_ordered_phases(config) == ["a"]

    def test_stops_at_unknown_next(self):
        config = _config(PhaseDefinition("a", next="b"), PhaseDefinition("b", next="nowhere"))
        assert derive_ordered_phases(config) == ["a", "b"]

    def test_cycle_is_truncated(self):
        config = _config(
            PhaseDefinition("a", start=True, next="b"),
            PhaseDefinition("b", next="c"),
            PhaseDefinition("c", next="b"),
        )
        assert derive_ordered_phases(config) == ["a", "b", "c"]

    def test_self_loop(self):
        config = _config(PhaseDefinition("a", next="a"))
        assert derive_ordered_phases(config) == ["a"]

    def test_no_phases(self):
        assert derive_ordered_phases(GameConfig()) == []
