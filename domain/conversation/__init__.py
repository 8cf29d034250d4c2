# Conversation Domain
"""
对话领域模型

包含：
- content - 消息内容（纯文本 / 多模态）与打包逻辑
- turn - 轮次与对话数据结构
- stage_state - 助手轮次的阶段状态机
- conversation_store - 内存对话存储与流式事件应用
"""

from domain.conversation.content import (
    TextPart,
    ImagePart,
    ContentPart,
    PlainText,
    Multimodal,
    MessageContent,
    StagedImage,
    build_outgoing_content,
    content_to_wire,
    content_from_wire,
)

from domain.conversation.turn import (
    ROLE_USER,
    ROLE_ASSISTANT,
    STAGES,
    StageLoading,
    TurnMetadata,
    Turn,
    Conversation,
    ConversationSummary,
)

from domain.conversation.stage_state import (
    StageStatus,
    StageStateTable,
    derive_stage_status,
)

from domain.conversation.conversation_store import ConversationStore

__all__ = [
    # content
    "TextPart",
    "ImagePart",
    "ContentPart",
    "PlainText",
    "Multimodal",
    "MessageContent",
    "StagedImage",
    "build_outgoing_content",
    "content_to_wire",
    "content_from_wire",
    # turn
    "ROLE_USER",
    "ROLE_ASSISTANT",
    "STAGES",
    "StageLoading",
    "TurnMetadata",
    "Turn",
    "Conversation",
    "ConversationSummary",
    # stage_state
    "StageStatus",
    "StageStateTable",
    "derive_stage_status",
    # store
    "ConversationStore",
]
