"""
Tests for phase advancement.

Tests:
- Next phase from the derived order, with round wrap
- Explicit targets
- Phase hook sequencing and failures
"""

from ..config_schema import GameConfig, PhaseDefinition
from ..engine_core.phases import advance_phase, compute_next_phase
from ..engine_core.state import GameContext

POKER_PHASES = ("bet", "deal", "act", "resolve")


def _boom(state, payload, ctx):
    raise KeyError("missing")


class TestComputeNextPhase:

    def test_steps_forward(self):
        update = compute_next_phase(GameContext(phase="bet", phases=POKER_PHASES))

        assert update.phase == "deal"
        assert update.round is None

    def test_wrap_increments_round(self):
        update = compute_next_phase(GameContext(phase="resolve", round=4, phases=POKER_PHASES))

        assert update.phase == "bet"
        assert update.round == 5

    def test_target_wins_without_round_change(self):
        update = compute_next_phase(GameContext(phase="resolve", phases=POKER_PHASES), target="bet")

        assert update.as_dict() == {"phase": "bet"}

    def test_target_without_phase_order(self):
        assert compute_next_phase(GameContext(phase="x"), target="y").phase == "y"

    def test_unknown_current_phase_enters_first_phase(self):
        update = compute_next_phase(GameContext(phase="lobby", round=2, phases=("bet", "deal", "act")))
        assert update.as_dict() == {"phase": "bet", "round": 3}

    def test_nothing_to_advance_to(self):
        assert compute_next_phase(GameContext(phase="play")) is None
        assert compute_next_phase(GameContext(phase="play", phases=())) is None

    def test_single_phase_wraps_onto_itself(self):
        update = compute_next_phase(GameContext(phase="play", phases=("play",)))
        assert update.as_dict() == {"phase": "play", "round": 1}


class TestAdvancePhase:

    def test_hook_order_and_contexts(self, recording_config):
        ctx = GameContext(phase="a", phases=("a", "b"), turn=7)
        transition = advance_phase(recording_config, {"log": []}, ctx)

        assert transition.context.phase == "b"
        assert transition.state["log"] == [("a:end", "a", 7), ("b:begin", "b", 7)]

    def test_entering_deal_deals(self, poker_config, poker_context):
        state = {"chips": {}, "pot": 0, "dealt": 0, "folded": [], "log": []}
        transition = advance_phase(poker_config, state, poker_context)

        assert transition.context.phase == "deal"
        assert transition.state["dealt"] == 1

    def test_resolve_wraps_to_bet_and_pays_out(self, poker_config, poker_context):
        state = {"chips": {"p1": 80, "p2": 80}, "pot": 40, "dealt": 1, "folded": ["p3"], "log": [], "winner": "p2"}
        ctx = poker_context._copy_with(phase="resolve", round=2, current_player_index=1)

        transition = advance_phase(poker_config, state, ctx)

        assert transition.context.phase == "bet"
        assert transition.context.round == 3
        assert transition.round_advanced
        assert transition.state["chips"] == {"p1": 80, "p2": 120}
        assert transition.state["pot"] == 0
        assert transition.state["folded"] == []

    def test_turn_order_untouched(self, poker_config, poker_context):
        ctx = poker_context._copy_with(current_player_index=2, turn=5)
        transition = advance_phase(poker_config, {"dealt": 0}, ctx)

        assert transition.context.turn_order == ("p1", "p2", "p3")
        assert transition.context.current_player_index == 2
        assert transition.context.turn == 5
        assert set(transition.updates) == {"phase"}

    def test_explicit_target_runs_hooks(self, recording_config):
        ctx = GameContext(phase="b", phases=("a", "b"))
        transition = advance_phase(recording_config, {"log": []}, ctx, target="a")

        assert transition.context.round == 0
        assert [entry[0] for entry in transition.state["log"]] == ["b:end", "a:begin"]

    def test_target_outside_config(self, recording_config):
        ctx = GameContext(phase="a", phases=("a", "b"))
        transition = advance_phase(recording_config, {"log": []}, ctx, target="bonus")

        assert transition.context.phase == "bonus"
        assert [entry[0] for entry in transition.state["log"]] == ["a:end"]

    def test_no_phase_order_is_noop(self):
        assert advance_phase(GameConfig(), {}, GameContext(phase="play")) is None

    def test_without_config(self):
        transition = advance_phase(None, {"x": 1}, GameContext(phase="a", phases=("a", "b")))

        assert transition.context.phase == "b"
        assert transition.state == {"x": 1}

    def test_failing_hook_keeps_state(self):
        config = GameConfig(
            phases=(
                PhaseDefinition("a", start=True, on_end=_boom, next="b"),
                PhaseDefinition("b", on_begin=lambda s, p, c: {**s, "entered": True}),
            ),
        )
        transition = advance_phase(config, {}, GameContext(phase="a", phases=("a", "b")))

        assert transition.context.phase == "b"
        assert transition.state == {"entered": True}
        assert transition.faults[0].source == "phase:a:on_end"
