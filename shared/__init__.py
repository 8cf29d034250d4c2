# Shared Kernel Layer
"""
共享内核层 - 被所有层依赖的跨层基础设施

包含：
- service_names: 服务名常量定义
- service_locator: 服务定位器（依赖注入容器）
- event_types: 事件类型常量定义
- event_bus: 事件总线（发布-订阅通信）
- error_types: 错误类型常量定义
- error_handler: 统一错误处理器
- i18n_manager: 国际化管理器
- async_runtime: qasync 融合事件循环
- safe_async_slot: 异步槽函数异常捕获

依赖方向（严格遵守，避免循环依赖）：
- service_names.py, event_types.py, error_types.py: 纯常量定义，不依赖任何其他模块
- service_locator.py: 仅依赖 service_names.py
- event_bus.py: 依赖 event_types.py，不依赖 error_handler.py
- error_handler.py: 依赖 event_bus.py、error_types.py，内部错误处理不能再调用自身
- 其他模块可依赖以上所有，但不能被以上模块反向依赖
"""

# 服务名常量
from shared.service_names import (
    SVC_EVENT_BUS,
    SVC_ERROR_HANDLER,
    SVC_I18N_MANAGER,
    SVC_CONFIG_MANAGER,
    SVC_COUNCIL_CLIENT,
    SVC_COUNCIL_SESSION,
)

# 服务定位器
from shared.service_locator import (
    ServiceLocator,
    ServiceNotFoundError,
)

# 事件类型
from shared.event_types import (
    EVENT_INIT_COMPLETE,
    EVENT_CONVERSATION_UPDATED,
    EVENT_CONVERSATION_LIST_UPDATED,
    EVENT_COUNCIL_LOADING_CHANGED,
    EVENT_ERROR_OCCURRED,
    EVENT_LANGUAGE_CHANGED,
    EVENT_CONFIG_CHANGED,
    CRITICAL_EVENTS,
)

# 事件总线
from shared.event_bus import EventBus

# 错误处理
from shared.error_types import (
    ErrorCategory,
    ErrorType,
    RecoveryStrategy,
)
from shared.error_handler import ErrorHandler

# 国际化
from shared.i18n_manager import (
    I18nManager,
    LANG_EN_US,
    LANG_ZH_CN,
)


__all__ = [
    # 服务名
    "SVC_EVENT_BUS",
    "SVC_ERROR_HANDLER",
    "SVC_I18N_MANAGER",
    "SVC_CONFIG_MANAGER",
    "SVC_COUNCIL_CLIENT",
    "SVC_COUNCIL_SESSION",
    # 服务定位器
    "ServiceLocator",
    "ServiceNotFoundError",
    # 事件
    "EVENT_INIT_COMPLETE",
    "EVENT_CONVERSATION_UPDATED",
    "EVENT_CONVERSATION_LIST_UPDATED",
    "EVENT_COUNCIL_LOADING_CHANGED",
    "EVENT_ERROR_OCCURRED",
    "EVENT_LANGUAGE_CHANGED",
    "EVENT_CONFIG_CHANGED",
    "CRITICAL_EVENTS",
    "EventBus",
    # 错误
    "ErrorCategory",
    "ErrorType",
    "RecoveryStrategy",
    "ErrorHandler",
    # 国际化
    "I18nManager",
    "LANG_EN_US",
    "LANG_ZH_CN",
]
