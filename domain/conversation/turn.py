# Conversation Turn Model
"""
对话轮次数据模型

职责：
- 定义 Turn（用户轮次 / 助手轮次）
- 定义助手轮次的阶段加载标志（StageLoading）和元数据（TurnMetadata）
- 定义 Conversation（有序的 Turn 序列）
- 负责与后端 JSON 结构互转

说明：
- 用户轮次携带 content（MessageContent）
- 助手轮次携带 stage1 / stage2 / stage3 三个阶段结果，结果一旦写入即不可变
- 阶段结果的具体结构对本模块不透明，原样透传给阶段视图
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from domain.conversation.content import (
    MessageContent,
    PlainText,
    content_from_wire,
    content_to_wire,
)


# ============================================================
# 常量定义
# ============================================================

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

STAGES = (1, 2, 3)


def _new_turn_id() -> str:
    return uuid.uuid4().hex


# ============================================================
# 数据结构
# ============================================================

@dataclass
class StageLoading:
    """各阶段是否正在进行"""
    stage1: bool = False
    stage2: bool = False
    stage3: bool = False

    def is_loading(self, stage: int) -> bool:
        return bool(getattr(self, f"stage{stage}"))

    def set_loading(self, stage: int, value: bool) -> None:
        setattr(self, f"stage{stage}", value)

    def any(self) -> bool:
        return self.stage1 or self.stage2 or self.stage3

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StageLoading":
        data = data or {}
        return cls(
            stage1=bool(data.get("stage1")),
            stage2=bool(data.get("stage2")),
            stage3=bool(data.get("stage3")),
        )


@dataclass
class TurnMetadata:
    """助手轮次元数据，仅 Stage 2 视图使用"""
    label_to_model: Dict[str, str] = field(default_factory=dict)
    aggregate_rankings: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TurnMetadata":
        data = data or {}
        return cls(
            label_to_model=dict(data.get("label_to_model") or {}),
            aggregate_rankings=list(data.get("aggregate_rankings") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label_to_model": dict(self.label_to_model),
            "aggregate_rankings": list(self.aggregate_rankings),
        }


@dataclass
class Turn:
    """
    对话中的一个轮次

    role=user 时使用 content；role=assistant 时使用阶段字段。
    """
    role: str
    content: Optional[MessageContent] = None
    stage1: Optional[Any] = None
    stage2: Optional[Any] = None
    stage3: Optional[Any] = None
    loading: StageLoading = field(default_factory=StageLoading)
    metadata: Optional[TurnMetadata] = None
    id: str = field(default_factory=_new_turn_id)

    def is_user(self) -> bool:
        return self.role == ROLE_USER

    def is_assistant(self) -> bool:
        return self.role == ROLE_ASSISTANT

    def get_stage_result(self, stage: int) -> Optional[Any]:
        """获取指定阶段的结果，未完成时为 None"""
        if stage not in STAGES:
            raise ValueError(f"Invalid stage: {stage}")
        return getattr(self, f"stage{stage}")

    def has_stage_result(self, stage: int) -> bool:
        return self.get_stage_result(stage) is not None

    def has_stage_activity(self) -> bool:
        """是否已有任一阶段开始或完成"""
        return self.loading.any() or any(self.has_stage_result(s) for s in STAGES)

    @classmethod
    def user(cls, content: MessageContent) -> "Turn":
        return cls(role=ROLE_USER, content=content)

    @classmethod
    def assistant(cls) -> "Turn":
        return cls(role=ROLE_ASSISTANT)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        """从后端 JSON 结构创建"""
        role = data.get("role", ROLE_USER)
        turn = cls(
            role=role,
            loading=StageLoading.from_dict(data.get("loading")),
            id=data.get("id") or _new_turn_id(),
        )
        if role == ROLE_USER:
            turn.content = content_from_wire(data.get("content"))
        else:
            turn.stage1 = data.get("stage1")
            turn.stage2 = data.get("stage2")
            turn.stage3 = data.get("stage3")
            if data.get("metadata") is not None:
                turn.metadata = TurnMetadata.from_dict(data.get("metadata"))
        return turn

    def to_dict(self) -> Dict[str, Any]:
        if self.is_user():
            return {
                "id": self.id,
                "role": self.role,
                "content": content_to_wire(self.content or PlainText("")),
            }
        return {
            "id": self.id,
            "role": self.role,
            "stage1": self.stage1,
            "stage2": self.stage2,
            "stage3": self.stage3,
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }


@dataclass
class Conversation:
    """对话（有序的 Turn 序列）"""
    id: str
    title: str = "New Conversation"
    created_at: str = ""
    turns: List[Turn] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.turns) == 0

    @property
    def last_turn(self) -> Optional[Turn]:
        return self.turns[-1] if self.turns else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Conversation":
        return cls(
            id=data["id"],
            title=data.get("title") or "New Conversation",
            created_at=data.get("created_at") or "",
            turns=[Turn.from_dict(m) for m in data.get("messages") or []],
        )


@dataclass
class ConversationSummary:
    """对话列表项"""
    id: str
    title: str = "New Conversation"
    created_at: str = ""
    message_count: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationSummary":
        return cls(
            id=data["id"],
            title=data.get("title") or "New Conversation",
            created_at=data.get("created_at") or "",
            message_count=int(data.get("message_count") or 0),
        )


__all__ = [
    "ROLE_USER",
    "ROLE_ASSISTANT",
    "STAGES",
    "StageLoading",
    "TurnMetadata",
    "Turn",
    "Conversation",
    "ConversationSummary",
]
