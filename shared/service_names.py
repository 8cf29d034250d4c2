# Service Name Constants
"""
服务名常量定义

职责：
- 集中定义 ServiceLocator 的服务键
- 避免字符串硬编码

设计原则：
- 纯常量定义，不依赖任何其他模块
- 所有服务名使用 SVC_ 前缀
"""

# ============================================================
# 共享内核层服务
# ============================================================

# 事件总线 - 跨组件通信
SVC_EVENT_BUS = "event_bus"

# 错误处理器 - 统一错误处理
SVC_ERROR_HANDLER = "error_handler"

# 国际化管理器 - 多语言文本
SVC_I18N_MANAGER = "i18n_manager"

# ============================================================
# 基础设施层服务
# ============================================================

# 配置管理器 - 统一配置访问
SVC_CONFIG_MANAGER = "config_manager"

# 议会后端客户端 - HTTP 访问
SVC_COUNCIL_CLIENT = "council_client"

# ============================================================
# 应用层服务
# ============================================================

# 议会会话 - 对话列表、当前对话、发送状态
SVC_COUNCIL_SESSION = "council_session"


__all__ = [
    "SVC_EVENT_BUS",
    "SVC_ERROR_HANDLER",
    "SVC_I18N_MANAGER",
    "SVC_CONFIG_MANAGER",
    "SVC_COUNCIL_CLIENT",
    "SVC_COUNCIL_SESSION",
]
