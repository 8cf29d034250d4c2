# Conversation Store
"""
对话存储（内存）

职责：
- 持有对话列表和当前对话
- 追加乐观的用户轮次 / 助手轮次
- 将后端流式事件应用到当前对话的最后一个助手轮次
- 请求失败时回滚乐观追加的轮次

设计原则：
- 对话轮次只在此处修改，界面层只读
- 阶段结果写入后不可覆盖
- 不依赖 Qt，便于单元测试

流式事件（后端 SSE）：
    stage1_start / stage1_complete
    stage2_start / stage2_complete（携带 metadata）
    stage3_start / stage3_complete
    title_complete / complete / error
"""

import logging
from typing import Any, Dict, List, Optional

from domain.conversation.content import MessageContent
from domain.conversation.turn import (
    Conversation,
    ConversationSummary,
    Turn,
    TurnMetadata,
)


# ============================================================
# 事件类型常量
# ============================================================

STREAM_STAGE1_START = "stage1_start"
STREAM_STAGE1_COMPLETE = "stage1_complete"
STREAM_STAGE2_START = "stage2_start"
STREAM_STAGE2_COMPLETE = "stage2_complete"
STREAM_STAGE3_START = "stage3_start"
STREAM_STAGE3_COMPLETE = "stage3_complete"
STREAM_TITLE_COMPLETE = "title_complete"
STREAM_COMPLETE = "complete"
STREAM_ERROR = "error"

_STAGE_START_EVENTS = {
    STREAM_STAGE1_START: 1,
    STREAM_STAGE2_START: 2,
    STREAM_STAGE3_START: 3,
}

_STAGE_COMPLETE_EVENTS = {
    STREAM_STAGE1_COMPLETE: 1,
    STREAM_STAGE2_COMPLETE: 2,
    STREAM_STAGE3_COMPLETE: 3,
}


class ConversationStore:
    """
    对话存储

    使用示例：
        store = ConversationStore()
        store.set_current(conversation)
        store.append_user_turn(PlainText("hi"))
        store.begin_assistant_turn()
        store.apply_stream_event({"type": "stage1_start"})
    """

    def __init__(self):
        self._logger = logging.getLogger(__name__)
        self._summaries: List[ConversationSummary] = []
        self._current: Optional[Conversation] = None
        self._pending_turn_ids: List[str] = []

    # ============================================================
    # 属性
    # ============================================================

    @property
    def current(self) -> Optional[Conversation]:
        """当前对话，未选择时为 None"""
        return self._current

    @property
    def summaries(self) -> List[ConversationSummary]:
        return list(self._summaries)

    # ============================================================
    # 对话列表
    # ============================================================

    def set_summaries(self, summaries: List[ConversationSummary]) -> None:
        self._summaries = list(summaries)

    def set_current(self, conversation: Optional[Conversation]) -> None:
        self._current = conversation
        self._pending_turn_ids = []

    def update_title(self, conversation_id: str, title: str) -> None:
        """更新对话标题（当前对话和列表项）"""
        if self._current is not None and self._current.id == conversation_id:
            self._current.title = title
        for summary in self._summaries:
            if summary.id == conversation_id:
                summary.title = title

    # ============================================================
    # 轮次追加
    # ============================================================

    def append_user_turn(self, content: MessageContent) -> Turn:
        """追加用户轮次（乐观更新）"""
        conversation = self._require_current()
        turn = Turn.user(content)
        conversation.turns.append(turn)
        self._pending_turn_ids.append(turn.id)
        return turn

    def begin_assistant_turn(self) -> Turn:
        """追加空的助手轮次，所有阶段为未开始"""
        conversation = self._require_current()
        turn = Turn.assistant()
        conversation.turns.append(turn)
        self._pending_turn_ids.append(turn.id)
        return turn

    def commit_pending_turns(self) -> None:
        """请求成功完成后，乐观轮次转为正式轮次"""
        self._pending_turn_ids = []

    def rollback_pending_turns(self) -> int:
        """
        移除乐观追加的轮次

        Returns:
            移除的轮次数
        """
        if self._current is None or not self._pending_turn_ids:
            self._pending_turn_ids = []
            return 0

        pending = set(self._pending_turn_ids)
        before = len(self._current.turns)
        self._current.turns = [t for t in self._current.turns if t.id not in pending]
        self._pending_turn_ids = []
        removed = before - len(self._current.turns)
        self._logger.info(f"Rolled back {removed} pending turns")
        return removed

    # ============================================================
    # 阶段更新
    # ============================================================

    def set_stage_loading(self, stage: int, loading: bool) -> bool:
        turn = self._last_assistant_turn()
        if turn is None:
            return False
        turn.loading.set_loading(stage, loading)
        return True

    def complete_stage(
        self,
        stage: int,
        result: Any,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        写入阶段结果并清除加载标志

        已有结果时不覆盖，返回 False。
        """
        turn = self._last_assistant_turn()
        if turn is None:
            return False

        if turn.has_stage_result(stage):
            self._logger.warning(
                f"Stage {stage} of turn {turn.id} already has a result, ignoring update"
            )
            turn.loading.set_loading(stage, False)
            return False

        setattr(turn, f"stage{stage}", result)
        turn.loading.set_loading(stage, False)
        if metadata is not None:
            turn.metadata = TurnMetadata.from_dict(metadata)
        return True

    def apply_stream_event(self, event: Dict[str, Any]) -> bool:
        """
        应用一个流式事件

        Args:
            event: 后端 SSE 事件，至少包含 "type"

        Returns:
            当前对话是否发生了变化
        """
        event_type = event.get("type")

        if event_type in _STAGE_START_EVENTS:
            return self.set_stage_loading(_STAGE_START_EVENTS[event_type], True)

        if event_type in _STAGE_COMPLETE_EVENTS:
            stage = _STAGE_COMPLETE_EVENTS[event_type]
            metadata = event.get("metadata") if stage == 2 else None
            return self.complete_stage(stage, event.get("data"), metadata)

        if event_type == STREAM_TITLE_COMPLETE:
            title = (event.get("data") or {}).get("title")
            if title and self._current is not None:
                self.update_title(self._current.id, title)
                return True
            return False

        if event_type == STREAM_COMPLETE:
            self.commit_pending_turns()
            return False

        if event_type == STREAM_ERROR:
            self._logger.error(f"Council stream error: {event.get('message')}")
            return False

        self._logger.debug(f"Ignoring unknown stream event: {event_type}")
        return False

    # ============================================================
    # 内部方法
    # ============================================================

    def _require_current(self) -> Conversation:
        if self._current is None:
            raise RuntimeError("No conversation selected")
        return self._current

    def _last_assistant_turn(self) -> Optional[Turn]:
        if self._current is None:
            return None
        last = self._current.last_turn
        if last is None or not last.is_assistant():
            self._logger.warning("Stream event received without an assistant turn")
            return None
        return last


__all__ = [
    "ConversationStore",
    "STREAM_STAGE1_START",
    "STREAM_STAGE1_COMPLETE",
    "STREAM_STAGE2_START",
    "STREAM_STAGE2_COMPLETE",
    "STREAM_STAGE3_START",
    "STREAM_STAGE3_COMPLETE",
    "STREAM_TITLE_COMPLETE",
    "STREAM_COMPLETE",
    "STREAM_ERROR",
]
