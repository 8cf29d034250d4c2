# Event Type Constants
"""
事件类型常量定义

职责：
- 集中定义 EventBus 的事件键
- 命名规范：EVENT_{模块}_{动作}，全大写下划线分隔

设计原则：
- 纯常量定义，不依赖任何其他模块

使用示例：
    from shared.event_types import EVENT_CONVERSATION_UPDATED
    event_bus.subscribe(EVENT_CONVERSATION_UPDATED, on_conversation_updated)
"""

# ============================================================
# 初始化事件
# ============================================================

# 所有初始化完成
EVENT_INIT_COMPLETE = "init_complete"

# ============================================================
# 对话事件
# ============================================================

# 当前对话内容变化（轮次追加、阶段更新、切换对话）
# 携带数据：
#   - conversation_id: Optional[str] - 当前对话 ID，未选择时为 None
EVENT_CONVERSATION_UPDATED = "conversation_updated"

# 对话列表变化
# 携带数据：
#   - count: int - 对话数量
EVENT_CONVERSATION_LIST_UPDATED = "conversation_list_updated"

# 发送状态变化
# 携带数据：
#   - is_loading: bool - 是否有未完成的发送
EVENT_COUNCIL_LOADING_CHANGED = "council_loading_changed"

# ============================================================
# 错误事件
# ============================================================

# 错误发生
# 携带数据：
#   - error_type: str
#   - error_category: str
#   - message: str
#   - recovery_hint: str
#   - context: dict
EVENT_ERROR_OCCURRED = "error_occurred"

# ============================================================
# 国际化事件
# ============================================================

# 语言切换
# 携带数据：
#   - old_language: str
#   - new_language: str
EVENT_LANGUAGE_CHANGED = "language_changed"

# ============================================================
# 配置事件
# ============================================================

# 配置项变化
# 携带数据：
#   - key: str
#   - old_value: Any
#   - new_value: Any
EVENT_CONFIG_CHANGED = "config_changed"


# 关键事件（handler 超时会记录警告）
CRITICAL_EVENTS = {
    EVENT_INIT_COMPLETE,
    EVENT_ERROR_OCCURRED,
}


__all__ = [
    "EVENT_INIT_COMPLETE",
    "EVENT_CONVERSATION_UPDATED",
    "EVENT_CONVERSATION_LIST_UPDATED",
    "EVENT_COUNCIL_LOADING_CHANGED",
    "EVENT_ERROR_OCCURRED",
    "EVENT_LANGUAGE_CHANGED",
    "EVENT_CONFIG_CHANGED",
    "CRITICAL_EVENTS",
]
