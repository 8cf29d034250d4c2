"""阶段状态机"""

import pytest

from domain.conversation import StageStateTable, StageStatus, Turn
from domain.conversation.stage_state import derive_stage_status


def _assistant(**fields):
    turn = Turn.assistant()
    for name, value in fields.items():
        setattr(turn, name, value)
    return turn


class TestDeriveStageStatus:

    def test_fresh_turn_is_pending(self):
        turn = Turn.assistant()
        assert [derive_stage_status(turn, s) for s in (1, 2, 3)] == [
            StageStatus.PENDING,
        ] * 3

    def test_loading_flag_means_in_flight(self):
        turn = Turn.assistant()
        turn.loading.stage1 = True
        assert derive_stage_status(turn, 1) == StageStatus.IN_FLIGHT

    def test_result_wins_over_loading_flag(self):
        turn = _assistant(stage2=[{"model": "m", "ranking": "r"}])
        turn.loading.stage2 = True
        assert derive_stage_status(turn, 2) == StageStatus.COMPLETE


class TestStageStateTable:

    def test_unknown_key_is_pending(self):
        assert StageStateTable().get("t", 1) == StageStatus.PENDING

    def test_observe_tracks_each_stage_independently(self):
        turn = _assistant(stage1=[{"model": "m", "response": "r"}])
        turn.loading.stage3 = True

        statuses = StageStateTable().observe(turn)

        assert statuses == {
            1: StageStatus.COMPLETE,
            2: StageStatus.PENDING,
            3: StageStatus.IN_FLIGHT,
        }

    def test_complete_is_terminal(self):
        table = StageStateTable()
        turn = _assistant(stage1=[{"model": "m", "response": "r"}])
        table.observe(turn)

        turn.stage1 = None
        statuses = table.observe(turn)

        assert statuses[1] == StageStatus.COMPLETE
        assert table.get(turn.id, 1) == StageStatus.COMPLETE

    def test_in_flight_can_return_to_pending(self):
        table = StageStateTable()
        turn = Turn.assistant()
        turn.loading.stage1 = True
        table.observe(turn)

        turn.loading.stage1 = False
        assert table.observe(turn)[1] == StageStatus.PENDING

    def test_states_are_keyed_by_turn(self):
        table = StageStateTable()
        done = _assistant(stage3={"model": "m", "response": "r"})
        fresh = Turn.assistant()

        table.observe(done)
        table.observe(fresh)

        assert table.get(done.id, 3) == StageStatus.COMPLETE
        assert table.get(fresh.id, 3) == StageStatus.PENDING
        assert len(table) == 6

    def test_invalid_stage_rejected(self):
        with pytest.raises(ValueError):
            StageStateTable().transition("t", 4, StageStatus.PENDING)

    def test_retain_and_clear(self):
        table = StageStateTable()
        kept, dropped = Turn.assistant(), Turn.assistant()
        table.observe(kept)
        table.observe(dropped)

        assert table.retain([kept.id]) == 3
        assert len(table) == 3
        assert all(key[0] == kept.id for key, _ in table)

        table.clear()
        assert len(table) == 0
