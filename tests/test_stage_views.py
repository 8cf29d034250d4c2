"""阶段视图：纯函数辅助与控件构建"""

import pytest
from PyQt6.QtWidgets import QWidget

from domain.conversation import StageStatus
from presentation.panels.conversation import StageDisplay
from presentation.panels.conversation.message_bubble import (
    MessageBubble,
    STAGE_PROGRESS_OBJECT_NAME,
)
from presentation.panels.conversation.stage_views import (
    Stage1View,
    Stage2View,
    Stage3View,
    create_stage_view,
    de_anonymize_text,
    format_aggregate_rankings,
    resolve_ranking_label,
    short_model_name,
)


LABEL_TO_MODEL = {
    "Response A": "openai/gpt-4o",
    "Response B": "anthropic/claude-sonnet",
}


class TestHelpers:

    @pytest.mark.parametrize("model,expected", [
        ("openai/gpt-4o", "gpt-4o"),
        ("gpt-4o", "gpt-4o"),
        (None, ""),
    ])
    def test_short_model_name(self, model, expected):
        assert short_model_name(model) == expected

    def test_de_anonymize_text(self):
        text = "Response B beats Response A. Response A is verbose."
        assert de_anonymize_text(text, LABEL_TO_MODEL) == (
            "**claude-sonnet** beats **gpt-4o**. **gpt-4o** is verbose."
        )

    def test_de_anonymize_keeps_backslashes_in_model_name(self):
        mapping = {"Response A": r"local\models\q4_\1"}
        assert de_anonymize_text("Response A wins", mapping) == (
            r"**local\models\q4_\1** wins"
        )

    def test_de_anonymize_without_mapping(self):
        assert de_anonymize_text("Response A", None) == "Response A"

    def test_resolve_ranking_label(self):
        assert resolve_ranking_label("Response A", LABEL_TO_MODEL) == "gpt-4o"
        assert resolve_ranking_label("Response Z", LABEL_TO_MODEL) == "Response Z"

    def test_format_aggregate_rankings(self):
        lines = format_aggregate_rankings([
            {"model": "openai/gpt-4o", "average_rank": 1.5, "rankings_count": 4},
            {"model": "anthropic/claude-sonnet", "average_rank": 2, "rankings_count": 4},
        ])
        assert lines == [
            "#1 gpt-4o  Avg: 1.50  (4 votes)",
            "#2 claude-sonnet  Avg: 2.00  (4 votes)",
        ]

    def test_format_aggregate_rankings_tolerates_garbage(self):
        assert format_aggregate_rankings(None) == []
        assert format_aggregate_rankings(["oops"]) == ["#1   Avg:   ( votes)"]


class TestStageViews:

    def test_stage1_one_tab_per_model(self, qapp):
        view = Stage1View([
            {"model": "openai/gpt-4o", "response": "A"},
            {"model": "anthropic/claude-sonnet", "response": "B"},
        ])
        assert view.tabs.count() == 2
        assert view.tabs.tabText(0) == "gpt-4o"

    def test_stage2_tabs_and_aggregate(self, qapp):
        view = Stage2View(
            [{
                "model": "openai/gpt-4o",
                "ranking": "FINAL RANKING: Response B, Response A",
                "parsed_ranking": ["Response B", "Response A"],
            }],
            LABEL_TO_MODEL,
            [{"model": "anthropic/claude-sonnet", "average_rank": 1.0, "rankings_count": 1}],
        )
        assert view.tabs.count() == 1
        assert view.aggregate_lines == ["#1 claude-sonnet  Avg: 1.00  (1 votes)"]

    def test_stage3_chairman(self, qapp):
        view = Stage3View({"model": "google/gemini-pro", "response": "Final"})
        assert view.chairman == "gemini-pro"

    @pytest.mark.parametrize("stage,payload", [
        (1, None),
        (1, "not a list"),
        (2, {"unexpected": True}),
        (3, None),
        (3, ["wrong shape"]),
    ])
    def test_malformed_payload_does_not_raise(self, qapp, stage, payload):
        assert isinstance(create_stage_view(stage, payload), QWidget)

    def test_invalid_stage(self, qapp):
        with pytest.raises(ValueError):
            create_stage_view(4, None)


class TestMessageBubbleStages:

    def test_pending_stage_renders_nothing(self, qapp):
        bubble = MessageBubble()
        assert bubble.render_stage(StageDisplay(stage=2, status=StageStatus.PENDING)) is None

    def test_in_flight_stage_renders_progress(self, qapp):
        bubble = MessageBubble()
        widget = bubble.render_stage(StageDisplay(stage=1, status=StageStatus.IN_FLIGHT))
        assert widget.objectName() == STAGE_PROGRESS_OBJECT_NAME

    def test_complete_stage_renders_view(self, qapp):
        bubble = MessageBubble()
        widget = bubble.render_stage(StageDisplay(
            stage=3,
            status=StageStatus.COMPLETE,
            payload={"model": "m/x", "response": "done"},
        ))
        assert isinstance(widget, Stage3View)
