# Conversation Panel Submodule
"""
对话面板子模块

包含对话面板的各个组件：
- ConversationViewModel - ViewModel 层，隔离 UI 与对话存储
- MessageBubble - 单个轮次的渲染
- Stage1View / Stage2View / Stage3View - 阶段结果视图
- MessageArea - 消息显示区域
- InputArea - 输入区域组件
- AttachmentManager - 附件管理器
"""

from presentation.panels.conversation.conversation_view_model import (
    ConversationViewModel,
    DisplayState,
    DisplayTurn,
    StageDisplay,
    STAGE_PROGRESS_LABELS,
)

from presentation.panels.conversation.stage_views import (
    Stage1View,
    Stage2View,
    Stage3View,
    create_stage_view,
    short_model_name,
    de_anonymize_text,
    format_aggregate_rankings,
)

from presentation.panels.conversation.message_bubble import (
    MessageBubble,
    USER_MESSAGE_BG,
    ASSISTANT_MESSAGE_BG,
)

from presentation.panels.conversation.message_area import (
    MessageArea,
    MESSAGE_SPACING,
)

from presentation.panels.conversation.attachment_manager import (
    AttachmentManager,
    LOAD_FAILED_MESSAGE,
)

from presentation.panels.conversation.input_area import (
    InputArea,
    is_submit_key,
)


__all__ = [
    # ViewModel
    "ConversationViewModel",
    "DisplayState",
    "DisplayTurn",
    "StageDisplay",
    "STAGE_PROGRESS_LABELS",
    # 阶段视图
    "Stage1View",
    "Stage2View",
    "Stage3View",
    "create_stage_view",
    "short_model_name",
    "de_anonymize_text",
    "format_aggregate_rankings",
    # 组件
    "MessageBubble",
    "USER_MESSAGE_BG",
    "ASSISTANT_MESSAGE_BG",
    "MessageArea",
    "MESSAGE_SPACING",
    "AttachmentManager",
    "LOAD_FAILED_MESSAGE",
    "InputArea",
    "is_submit_key",
]
