"""对话 ViewModel 与对话面板的显示、提交逻辑"""

import asyncio

import pytest

from domain.conversation import (
    Conversation,
    ImagePart,
    Multimodal,
    PlainText,
    StagedImage,
    StageStatus,
    TextPart,
    Turn,
    TurnMetadata,
)
from presentation.panels.conversation import ConversationViewModel, DisplayState
from presentation.panels.conversation_panel import ConversationPanel


IMAGE = StagedImage("data:image/png;base64,AAAA", "a.png")


@pytest.fixture
def view_model(qapp):
    return ConversationViewModel()


def _conversation_with_assistant(assistant):
    return Conversation(
        id="c1",
        turns=[Turn.user(PlainText("question")), assistant],
    )


# ============================================================
# 显示状态
# ============================================================

class TestDisplayState:

    def test_no_conversation(self, view_model):
        view_model.set_conversation(None)

        assert view_model.display_state == DisplayState.NO_CONVERSATION
        assert not view_model.show_composer
        assert view_model.placeholder_texts() == (
            "Welcome to LLM Council",
            "Create a new conversation to get started",
        )

    def test_empty_conversation_shows_composer(self, view_model, empty_conversation):
        view_model.set_conversation(empty_conversation)

        assert view_model.display_state == DisplayState.EMPTY
        assert view_model.show_composer
        assert view_model.placeholder_texts()[0] == "Start a conversation"

    def test_composer_hidden_after_first_turn(self, view_model, empty_conversation):
        view_model.set_conversation(empty_conversation)
        empty_conversation.turns.append(Turn.user(PlainText("hi")))
        view_model.set_conversation(empty_conversation, is_loading=True)

        assert view_model.display_state == DisplayState.MESSAGES
        assert not view_model.show_composer
        assert view_model.placeholder_texts() is None

    def test_render_and_loading_signals(self, view_model, empty_conversation):
        renders, loading = [], []
        view_model.render_changed.connect(lambda: renders.append(True))
        view_model.loading_changed.connect(loading.append)

        view_model.set_conversation(empty_conversation, is_loading=True)
        view_model.set_conversation(empty_conversation, is_loading=True)
        view_model.set_conversation(empty_conversation, is_loading=False)

        assert len(renders) == 3
        assert loading == [True, False]


# ============================================================
# 阶段渲染计划
# ============================================================

class TestStageRendering:

    def test_only_stage1_in_flight(self, view_model):
        assistant = Turn.assistant()
        assistant.loading.stage1 = True
        view_model.set_conversation(_conversation_with_assistant(assistant), True)

        stages = view_model.display_turns[1].stages
        assert [s.status for s in stages] == [
            StageStatus.IN_FLIGHT,
            StageStatus.PENDING,
            StageStatus.PENDING,
        ]
        assert len(view_model.display_turns[1].visible_stages) == 1

    def test_two_stages_complete(self, view_model):
        assistant = Turn.assistant()
        assistant.stage1 = [{"model": "openai/gpt-4o", "response": "r"}]
        assistant.stage2 = [{"model": "openai/gpt-4o", "ranking": "Response A"}]
        assistant.metadata = TurnMetadata(
            label_to_model={"Response A": "openai/gpt-4o"},
            aggregate_rankings=[{"model": "openai/gpt-4o", "average_rank": 1}],
        )
        view_model.set_conversation(_conversation_with_assistant(assistant), True)

        stages = view_model.display_turns[1].stages
        assert [s.status for s in stages] == [
            StageStatus.COMPLETE,
            StageStatus.COMPLETE,
            StageStatus.PENDING,
        ]
        assert stages[0].payload == assistant.stage1
        assert stages[1].label_to_model == {"Response A": "openai/gpt-4o"}
        assert len(stages[1].aggregate_rankings) == 1

    def test_user_turn_keeps_content(self, view_model, conversation_with_turns):
        view_model.set_conversation(conversation_with_turns)

        user = view_model.display_turns[0]
        assert user.is_user()
        assert user.content == PlainText("Which sort?")
        assert user.stages == []

    def test_completed_stage_stays_complete_after_data_cleared(self, view_model):
        assistant = Turn.assistant()
        assistant.stage3 = {"model": "m", "response": "r"}
        conversation = _conversation_with_assistant(assistant)
        view_model.set_conversation(conversation)

        assistant.stage3 = None
        view_model.set_conversation(conversation)

        stage3 = view_model.display_turns[1].stages[2]
        assert stage3.status == StageStatus.COMPLETE
        assert stage3.payload is None

    def test_switching_conversation_resets_stage_table(self, view_model, conversation_with_turns):
        view_model.set_conversation(conversation_with_turns)
        assert len(view_model.stage_table) == 3

        view_model.set_conversation(Conversation(id="other"))
        assert len(view_model.stage_table) == 0

    def test_reloading_same_conversation_keeps_stage_table_bounded(self, view_model):
        payload = {
            "id": "c1",
            "title": "Sorting",
            "messages": [
                {"role": "user", "content": "Which sort?"},
                {
                    "role": "assistant",
                    "stage1": [{"model": "m", "response": "r"}],
                    "stage2": [{"model": "m", "ranking": "Response A"}],
                    "stage3": {"model": "m", "response": "final"},
                },
            ],
        }

        sizes = []
        for _ in range(5):
            view_model.set_conversation(Conversation.from_dict(payload))
            sizes.append(len(view_model.stage_table))

        assert sizes == [3, 3, 3, 3, 3]
        assistant_id = view_model.display_turns[1].id
        assert all(key[0] == assistant_id for key, _ in view_model.stage_table)

    def test_rolled_back_turn_state_is_dropped(self, view_model, empty_conversation):
        empty_conversation.turns.extend([Turn.user(PlainText("hi")), Turn.assistant()])
        view_model.set_conversation(empty_conversation, is_loading=True)
        assert len(view_model.stage_table) == 3

        del empty_conversation.turns[:]
        view_model.set_conversation(empty_conversation)
        assert len(view_model.stage_table) == 0


class TestConsultingIndicator:

    def test_shown_before_any_stage_starts(self, view_model):
        view_model.set_conversation(_conversation_with_assistant(Turn.assistant()), True)
        assert view_model.show_consulting_indicator

    def test_hidden_once_a_stage_starts(self, view_model):
        assistant = Turn.assistant()
        assistant.loading.stage1 = True
        view_model.set_conversation(_conversation_with_assistant(assistant), True)
        assert not view_model.show_consulting_indicator

    def test_hidden_when_not_loading(self, view_model):
        view_model.set_conversation(_conversation_with_assistant(Turn.assistant()), False)
        assert not view_model.show_consulting_indicator


# ============================================================
# 提交
# ============================================================

class TestSubmit:

    def test_can_submit(self, view_model):
        assert not view_model.can_submit("", 0)
        assert not view_model.can_submit("   \n", 0)
        assert view_model.can_submit("hi", 0)
        assert view_model.can_submit("", 1)

    def test_submit_empty_returns_none(self, view_model):
        submitted = []
        view_model.message_submitted.connect(submitted.append)

        assert view_model.submit("  ", []) is None
        assert submitted == []

    def test_submit_while_loading_returns_none(self, view_model, empty_conversation):
        view_model.set_conversation(empty_conversation, is_loading=True)
        assert view_model.submit("hello", [IMAGE]) is None

    def test_submit_emits_content(self, view_model):
        submitted = []
        view_model.message_submitted.connect(submitted.append)

        content = view_model.submit("hello", [IMAGE])

        assert content == Multimodal((TextPart("hello"), ImagePart(IMAGE.data_url)))
        assert submitted == [content]


# ============================================================
# 面板集成
# ============================================================

async def _fake_reader(path):
    return f"data:image/png;base64,{path.rsplit('/', 1)[-1]}"


class TestConversationPanel:

    def test_placeholder_without_conversation(self, qapp):
        panel = ConversationPanel(reader=_fake_reader)

        assert panel.message_area.is_showing_placeholder
        assert not panel.is_composer_visible

    def test_select_remove_type_submit(self, qapp, empty_conversation):
        panel = ConversationPanel(reader=_fake_reader)
        panel.set_conversation(empty_conversation)
        submitted = []
        panel.message_submitted.connect(submitted.append)

        asyncio.run(panel.attachment_manager.select_files(["/p/one.png", "/p/two.png"]))
        panel.attachment_manager.remove_image(0)
        panel.input_area.set_text("what is this?")

        assert panel.input_area.is_send_enabled()
        content = panel.submit_draft()

        assert content == Multimodal((
            TextPart("what is this?"),
            ImagePart("data:image/png;base64,two.png"),
        ))
        assert submitted == [content]
        assert panel.input_area.get_text() == ""
        assert panel.attachment_manager.count() == 0

    def test_submit_draft_with_nothing_staged(self, qapp, empty_conversation):
        panel = ConversationPanel(reader=_fake_reader)
        panel.set_conversation(empty_conversation)

        assert panel.submit_draft() is None
        assert not panel.input_area.is_send_enabled()

    def test_messages_render_and_composer_hides(self, qapp, conversation_with_turns):
        panel = ConversationPanel(reader=_fake_reader)
        panel.set_conversation(conversation_with_turns)

        assert not panel.message_area.is_showing_placeholder
        assert len(panel.message_area.turn_widgets) == 2
        assert not panel.is_composer_visible

    def test_consulting_indicator_shown_while_waiting(self, qapp):
        panel = ConversationPanel(reader=_fake_reader)
        panel.set_conversation(_conversation_with_assistant(Turn.assistant()), True)

        assert panel.message_area.is_consulting_visible
        assert not panel.input_area.is_send_enabled()
