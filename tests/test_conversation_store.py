"""对话存储：乐观追加、流式事件、回滚"""

import pytest

from domain.conversation import (
    Conversation,
    ConversationStore,
    ConversationSummary,
    PlainText,
)


@pytest.fixture
def store():
    store = ConversationStore()
    store.set_summaries([ConversationSummary(id="c1", title="Old")])
    store.set_current(Conversation(id="c1", title="Old"))
    return store


def test_append_requires_current_conversation():
    with pytest.raises(RuntimeError):
        ConversationStore().append_user_turn(PlainText("hi"))


def test_optimistic_turns_are_appended(store):
    store.append_user_turn(PlainText("hi"))
    assistant = store.begin_assistant_turn()

    assert [t.role for t in store.current.turns] == ["user", "assistant"]
    assert not assistant.has_stage_activity()


def test_stage_events_fill_last_assistant_turn(store):
    store.append_user_turn(PlainText("hi"))
    turn = store.begin_assistant_turn()

    assert store.apply_stream_event({"type": "stage1_start"})
    assert turn.loading.stage1

    assert store.apply_stream_event({"type": "stage1_complete", "data": [{"model": "m"}]})
    assert turn.stage1 == [{"model": "m"}]
    assert not turn.loading.stage1


def test_stage2_complete_sets_metadata(store):
    store.append_user_turn(PlainText("hi"))
    turn = store.begin_assistant_turn()

    store.apply_stream_event({
        "type": "stage2_complete",
        "data": [],
        "metadata": {
            "label_to_model": {"Response A": "openai/gpt-4o"},
            "aggregate_rankings": [{"model": "openai/gpt-4o", "average_rank": 1.0}],
        },
    })

    assert turn.stage2 == []
    assert turn.metadata.label_to_model == {"Response A": "openai/gpt-4o"}
    assert len(turn.metadata.aggregate_rankings) == 1


def test_completed_stage_is_not_overwritten(store):
    store.append_user_turn(PlainText("hi"))
    turn = store.begin_assistant_turn()
    store.apply_stream_event({"type": "stage3_complete", "data": {"response": "first"}})

    changed = store.apply_stream_event({"type": "stage3_complete", "data": {"response": "second"}})

    assert not changed
    assert turn.stage3 == {"response": "first"}


def test_stage_event_without_assistant_turn_is_ignored(store):
    store.append_user_turn(PlainText("hi"))
    assert not store.apply_stream_event({"type": "stage1_start"})


def test_title_complete_updates_current_and_summary(store):
    changed = store.apply_stream_event({"type": "title_complete", "data": {"title": "Sorting"}})

    assert changed
    assert store.current.title == "Sorting"
    assert store.summaries[0].title == "Sorting"


def test_unknown_event_is_ignored(store):
    assert not store.apply_stream_event({"type": "heartbeat"})


def test_rollback_removes_only_pending_turns(store):
    store.append_user_turn(PlainText("first"))
    store.begin_assistant_turn()
    store.apply_stream_event({"type": "complete"})

    store.append_user_turn(PlainText("second"))
    store.begin_assistant_turn()

    assert store.rollback_pending_turns() == 2
    assert len(store.current.turns) == 2
    assert store.current.turns[0].content == PlainText("first")


def test_rollback_after_commit_is_noop(store):
    store.append_user_turn(PlainText("hi"))
    store.commit_pending_turns()
    assert store.rollback_pending_turns() == 0
    assert len(store.current.turns) == 1
