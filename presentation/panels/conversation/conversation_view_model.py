# Conversation ViewModel - UI Data Layer
"""
对话面板 ViewModel - UI 与数据层的中间层

职责：
- 将 Conversation 转换为 UI 友好的渲染计划（DisplayTurn / StageDisplay）
- 维护每个助手轮次各阶段的状态（StageStateTable）
- 判断显示状态（未选择对话 / 空对话 / 消息列表）
- 判断输入区可见性和发送按钮可用性
- 打包输入内容并发出 message_submitted 信号

设计目标：
- UI 组件只依赖 ViewModel 提供的数据和方法
- 不持有对话数据的所有权，对话由 ConversationStore 负责，这里只读
- 不依赖具体控件，便于单元测试

使用示例：
    from presentation.panels.conversation.conversation_view_model import (
        ConversationViewModel
    )

    view_model = ConversationViewModel()
    view_model.set_conversation(conversation, is_loading=False)
    for display_turn in view_model.display_turns:
        ...
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from domain.conversation import (
    Conversation,
    MessageContent,
    STAGES,
    StagedImage,
    StageStateTable,
    StageStatus,
    Turn,
    build_outgoing_content,
)


# ============================================================
# 常量定义
# ============================================================

class DisplayState(Enum):
    """对话区显示状态"""
    NO_CONVERSATION = "no_conversation"  # 未选择对话
    EMPTY = "empty"                      # 已选择但没有消息
    MESSAGES = "messages"                # 有消息


# 各阶段进行中的提示：(i18n key, 默认文本)
STAGE_PROGRESS_LABELS: Dict[int, Tuple[str, str]] = {
    1: ("stage.progress.1", "Running Stage 1: Collecting individual responses..."),
    2: ("stage.progress.2", "Running Stage 2: Peer rankings..."),
    3: ("stage.progress.3", "Running Stage 3: Final synthesis..."),
}

# 各显示状态的占位文本：(标题 key, 标题, 副标题 key, 副标题)
PLACEHOLDER_TEXTS: Dict[DisplayState, Tuple[str, str, str, str]] = {
    DisplayState.NO_CONVERSATION: (
        "placeholder.welcome.title", "Welcome to LLM Council",
        "placeholder.welcome.subtitle", "Create a new conversation to get started",
    ),
    DisplayState.EMPTY: (
        "placeholder.empty.title", "Start a conversation",
        "placeholder.empty.subtitle", "Ask a question to consult the LLM Council",
    ),
}

CONSULTING_TEXT = ("status.consulting", "Consulting the council...")


# ============================================================
# 数据结构
# ============================================================

@dataclass
class StageDisplay:
    """
    单个阶段的渲染计划

    status 为 IN_FLIGHT 时显示进度提示；COMPLETE 时把 payload 交给阶段视图；
    PENDING 时不渲染。
    """
    stage: int
    status: StageStatus
    payload: Any = None
    label_to_model: Dict[str, str] = field(default_factory=dict)
    aggregate_rankings: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_visible(self) -> bool:
        return self.status != StageStatus.PENDING


@dataclass
class DisplayTurn:
    """UI 友好的轮次"""
    id: str
    role: str
    content: Optional[MessageContent] = None
    stages: List[StageDisplay] = field(default_factory=list)

    def is_user(self) -> bool:
        return self.role == "user"

    @property
    def visible_stages(self) -> List[StageDisplay]:
        return [s for s in self.stages if s.is_visible]


# ============================================================
# ViewModel 类
# ============================================================

class ConversationViewModel(QObject):
    """
    对话面板 ViewModel

    作为 UI 与 ConversationStore 之间的中间层。
    """

    # 信号定义
    render_changed = pyqtSignal()                # 渲染计划变化
    loading_changed = pyqtSignal(bool)           # 加载状态变化
    message_submitted = pyqtSignal(object)       # 提交的消息内容 (MessageContent)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)

        # 内部状态
        self._conversation: Optional[Conversation] = None
        self._is_loading: bool = False
        self._display_turns: List[DisplayTurn] = []
        self._stage_table = StageStateTable()

        # 延迟获取的服务
        self._i18n = None
        self._logger = None

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def i18n(self):
        """延迟获取国际化管理器"""
        if self._i18n is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_I18N_MANAGER
            self._i18n = ServiceLocator.get_optional(SVC_I18N_MANAGER)
        return self._i18n

    @property
    def logger(self):
        """延迟获取日志器"""
        if self._logger is None:
            self._logger = logging.getLogger("conversation_view_model")
        return self._logger

    def get_text(self, key: str, default: str = "") -> str:
        if self.i18n:
            return self.i18n.get_text(key, default)
        return default

    # ============================================================
    # 属性
    # ============================================================

    @property
    def conversation(self) -> Optional[Conversation]:
        return self._conversation

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def display_turns(self) -> List[DisplayTurn]:
        return self._display_turns

    @property
    def stage_table(self) -> StageStateTable:
        return self._stage_table

    @property
    def display_state(self) -> DisplayState:
        if self._conversation is None:
            return DisplayState.NO_CONVERSATION
        if self._conversation.is_empty:
            return DisplayState.EMPTY
        return DisplayState.MESSAGES

    @property
    def show_composer(self) -> bool:
        """输入区仅在已选择对话且对话为空时显示"""
        return self.display_state == DisplayState.EMPTY

    @property
    def show_consulting_indicator(self) -> bool:
        """
        是否显示“正在咨询”提示

        发送尚未结束，且最后一个轮次还没有任何阶段开始或完成。
        """
        if not self._is_loading or self._conversation is None:
            return False
        last = self._conversation.last_turn
        if last is None or last.is_user():
            return True
        return not last.has_stage_activity()

    def placeholder_texts(self) -> Optional[Tuple[str, str]]:
        """当前显示状态的占位标题和副标题，MESSAGES 状态返回 None"""
        entry = PLACEHOLDER_TEXTS.get(self.display_state)
        if entry is None:
            return None
        title_key, title, subtitle_key, subtitle = entry
        return self.get_text(title_key, title), self.get_text(subtitle_key, subtitle)

    def stage_progress_label(self, stage: int) -> str:
        key, default = STAGE_PROGRESS_LABELS[stage]
        return self.get_text(key, default)

    def consulting_text(self) -> str:
        return self.get_text(*CONSULTING_TEXT)

    # ============================================================
    # 数据加载
    # ============================================================

    def set_conversation(
        self,
        conversation: Optional[Conversation],
        is_loading: bool = False,
    ) -> None:
        """
        设置当前对话并重建渲染计划

        每次对话内容或加载状态变化时调用。切换到另一个对话时重置阶段状态表，
        同一对话内只保留仍存在的轮次的状态。
        """
        previous_id = self._conversation.id if self._conversation else None
        new_id = conversation.id if conversation else None
        if previous_id != new_id:
            self._stage_table.clear()

        self._conversation = conversation
        self._display_turns = self._build_display_turns(conversation)
        if conversation is not None:
            self._stage_table.retain(turn.id for turn in conversation.turns)

        if is_loading != self._is_loading:
            self._is_loading = is_loading
            self.loading_changed.emit(is_loading)

        self.render_changed.emit()

    def _build_display_turns(
        self, conversation: Optional[Conversation]
    ) -> List[DisplayTurn]:
        if conversation is None:
            return []

        display_turns = []
        for turn in conversation.turns:
            if turn.is_user():
                display_turns.append(
                    DisplayTurn(id=turn.id, role=turn.role, content=turn.content)
                )
            elif turn.is_assistant():
                display_turns.append(self._build_assistant_turn(turn))
            else:
                self.logger.warning(f"Skipping turn with unknown role: {turn.role}")
        return display_turns

    def _build_assistant_turn(self, turn: Turn) -> DisplayTurn:
        statuses = self._stage_table.observe(turn)
        metadata = turn.metadata

        stages = []
        for stage in STAGES:
            status = statuses[stage]
            display = StageDisplay(stage=stage, status=status)
            if status == StageStatus.COMPLETE:
                # 表中已完成但数据被外部清空时，payload 为 None，交给视图按空数据渲染
                display.payload = turn.get_stage_result(stage)
                if stage == 2 and metadata is not None:
                    display.label_to_model = dict(metadata.label_to_model)
                    display.aggregate_rankings = list(metadata.aggregate_rankings)
            stages.append(display)

        return DisplayTurn(id=turn.id, role=turn.role, stages=stages)

    # ============================================================
    # 提交控制
    # ============================================================

    def can_submit(self, text: str, image_count: int) -> bool:
        """发送按钮是否可用"""
        if self._is_loading:
            return False
        return bool(text.strip()) or image_count > 0

    def submit(
        self,
        text: str,
        staged_images: Sequence[StagedImage],
    ) -> Optional[MessageContent]:
        """
        打包并提交消息

        前置条件不满足时返回 None，不发出任何信号。
        发出 message_submitted 后立即返回，不等待发送结果。
        """
        if not self.can_submit(text, len(staged_images)):
            return None

        content = build_outgoing_content(text, staged_images)
        self.logger.info(
            f"Submitting message: {len(text)} chars, {len(staged_images)} images"
        )
        self.message_submitted.emit(content)
        return content


__all__ = [
    "ConversationViewModel",
    "DisplayState",
    "DisplayTurn",
    "StageDisplay",
    "STAGE_PROGRESS_LABELS",
    "PLACEHOLDER_TEXTS",
]
