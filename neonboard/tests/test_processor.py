"""
Tests for batch processing of queued actions.

Tests:
- Applying allowed moves and consuming them
- Leaving disallowed and failing actions queued
- Strict queue order
- Context is never changed by moves
"""

from ..config_schema import GameConfig, PhaseDefinition
from ..engine_core.action import RejectionReason
from ..engine_core.processor import ActionProcessor, process_batch
from ..engine_core.state import GameContext

COUNTER_STATE = {"score": 0, "turns_played": [], "conceded": []}


def _append(state, payload, ctx):
    return {**state, "items": [*state["items"], payload["value"]]}


def _overwrite(state, payload, ctx):
    return {**state, "items": [payload["value"]]}


def _ordering_config():
    return GameConfig(
        phases=(PhaseDefinition("main", moves={"append": _append, "overwrite": _overwrite}),),
    )


class TestProcessBatch:

    def test_increment_is_applied_and_consumed(self, counter_config, make_action):
        action = make_action("increment", {"amount": 2})
        result = process_batch(counter_config, COUNTER_STATE, GameContext(phase="play"), [action])

        assert result.state["score"] == 2
        assert result.consumed_ids == [action.id]
        assert result.rejected == []
        assert result.changed

    def test_unknown_move_stays_queued(self, counter_config, make_action):
        action = make_action("unknownMove")
        result = process_batch(counter_config, COUNTER_STATE, GameContext(phase="play"), [action])

        assert result.state == COUNTER_STATE
        assert result.consumed_ids == []
        assert result.rejected[0].action_id == action.id
        assert result.rejected[0].reason == RejectionReason.NOT_ALLOWED
        assert not result.changed

    def test_move_of_another_phase_stays_queued(self, poker_config, poker_context, make_action):
        check = make_action("check")
        fold = make_action("fold", player_id="p3")
        state = {"chips": {}, "pot": 0, "dealt": 0, "folded": [], "log": []}

        result = process_batch(poker_config, state, poker_context, [check, fold])

        assert result.consumed_ids == [fold.id]
        assert result.state["folded"] == ["p3"]
        assert [r.action_id for r in result.rejected] == [check.id]

    def test_queue_order_by_created_at(self, make_action):
        overwrite = make_action("overwrite", {"value": "x"}, created_at=1.0)
        append = make_action("append", {"value": "y"}, created_at=2.0)
        config = _ordering_config()
        ctx = GameContext(phase="main")

        result = process_batch(config, {"items": []}, ctx, [append, overwrite])
        assert result.state["items"] == ["x", "y"]
        assert result.consumed_ids == [overwrite.id, append.id]

        overwrite = make_action("overwrite", {"value": "x"}, created_at=4.0)
        append = make_action("append", {"value": "y"}, created_at=3.0)
        result = process_batch(config, {"items": []}, ctx, [append, overwrite])
        assert result.state["items"] == ["x"]

    def test_ties_keep_submission_order(self, make_action):
        first = make_action("append", {"value": 1}, created_at=5.0)
        second = make_action("append", {"value": 2}, created_at=5.0)

        result = process_batch(_ordering_config(), {"items": []}, GameContext(phase="main"), [first, second])
        assert result.state["items"] == [1, 2]

    def test_empty_batch_is_noop(self, counter_config):
        ctx = GameContext(phase="play", turn=3)
        result = process_batch(counter_config, COUNTER_STATE, ctx, [])

        assert result.state is COUNTER_STATE
        assert result.context == ctx
        assert not result.changed

    def test_fault_keeps_running_state(self, counter_config, make_action):
        good = make_action("increment", {"amount": 2})
        bad = make_action("increment", {"amount": "lots"})
        later = make_action("increment", {"amount": 3})

        result = process_batch(counter_config, COUNTER_STATE, GameContext(phase="play"), [good, bad, later])

        assert result.state["score"] == 5
        assert result.consumed_ids == [good.id, later.id]
        assert result.rejected[0].reason == RejectionReason.REDUCER_FAULT
        assert result.faults[0].action_id == bad.id
        assert result.faults[0].source == "move:increment"

    def test_missing_reducer(self, make_action):
        config = GameConfig(moves={"ghost": None}, phases=(PhaseDefinition("main"),))
        result = process_batch(config, {}, GameContext(phase="main"), [make_action("ghost")])

        assert result.rejected[0].reason == RejectionReason.NO_REDUCER

    def test_reducer_sees_submitter(self, counter_config, make_action):
        result = process_batch(
            counter_config,
            COUNTER_STATE,
            GameContext(phase="play"),
            [make_action("concede", player_id="p2")],
        )
        assert result.state["conceded"] == ["p2"]

    def test_context_copied_through(self, poker_config, poker_context, make_action):
        ctx = poker_context._copy_with(turn=4, round=1, current_player_index=1)
        state = {"chips": {"p1": 100}, "pot": 0, "dealt": 0, "folded": [], "log": []}
        result = ActionProcessor(poker_config).process_batch(
            state, ctx, [make_action("bet", {"amount": 10})]
        )

        assert result.context == ctx
        update = result.document_update()
        assert update["state"]["pot"] == 10
        assert update["phase"] == "bet"
        assert update["turn"] == 4
        assert update["round"] == 1
        assert update["current_player_index"] == 1
        assert update["turn_order"] == ["p1", "p2", "p3"]
        assert update["phases"] == ["bet", "deal", "act", "resolve"]

    def test_input_state_not_mutated(self, counter_config, make_action):
        state = {"score": 1, "turns_played": [], "conceded": []}
        process_batch(counter_config, state, GameContext(phase="play"), [make_action("increment")])

        assert state["score"] == 1
