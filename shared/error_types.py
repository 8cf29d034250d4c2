# Error Type Constants
"""
错误类型常量定义

职责：
- 集中定义错误分类和类型常量
- 定义恢复策略映射
- 作为 ErrorHandler 错误分类的基础

设计原则：
- 纯常量和枚举定义，不依赖任何其他模块
- 每个错误类型关联一个主分类和恢复策略
"""

from enum import Enum, auto
from typing import Dict


class ErrorCategory(Enum):
    """错误主分类"""

    # 可自动恢复或重试即可（如网络超时）
    RECOVERABLE = auto()

    # 需用户操作（如后端未启动、文件无权限）
    USER_ACTIONABLE = auto()

    # 致命错误（需重启应用）
    FATAL = auto()


class ErrorType(Enum):
    """错误子分类"""

    # ============================================================
    # 网络错误
    # ============================================================
    NETWORK_TIMEOUT = "network_timeout"
    NETWORK_CONNECTION = "network_connection"

    # ============================================================
    # 议会后端错误
    # ============================================================
    COUNCIL_NOT_FOUND = "council_not_found"
    COUNCIL_HTTP_ERROR = "council_http_error"
    COUNCIL_STREAM_ERROR = "council_stream_error"
    COUNCIL_RESPONSE_PARSE = "council_response_parse"

    # ============================================================
    # 附件错误
    # ============================================================
    ATTACHMENT_READ = "attachment_read"
    FILE_NOT_FOUND = "file_not_found"
    FILE_PERMISSION = "file_permission"

    # ============================================================
    # 系统错误
    # ============================================================
    MEMORY_OVERFLOW = "memory_overflow"

    # ============================================================
    # 未知错误
    # ============================================================
    UNKNOWN = "unknown"


# ============================================================
# 错误类型到主分类的映射
# ============================================================

ERROR_CATEGORY_MAP: Dict[ErrorType, ErrorCategory] = {
    ErrorType.NETWORK_TIMEOUT: ErrorCategory.RECOVERABLE,
    ErrorType.NETWORK_CONNECTION: ErrorCategory.USER_ACTIONABLE,
    ErrorType.COUNCIL_NOT_FOUND: ErrorCategory.USER_ACTIONABLE,
    ErrorType.COUNCIL_HTTP_ERROR: ErrorCategory.RECOVERABLE,
    ErrorType.COUNCIL_STREAM_ERROR: ErrorCategory.RECOVERABLE,
    ErrorType.COUNCIL_RESPONSE_PARSE: ErrorCategory.RECOVERABLE,
    ErrorType.ATTACHMENT_READ: ErrorCategory.USER_ACTIONABLE,
    ErrorType.FILE_NOT_FOUND: ErrorCategory.USER_ACTIONABLE,
    ErrorType.FILE_PERMISSION: ErrorCategory.USER_ACTIONABLE,
    ErrorType.MEMORY_OVERFLOW: ErrorCategory.FATAL,
    ErrorType.UNKNOWN: ErrorCategory.USER_ACTIONABLE,
}


# ============================================================
# 恢复策略定义
# ============================================================

class RecoveryStrategy:
    """恢复策略配置"""

    def __init__(
        self,
        retry: bool = False,
        user_message: str = "",
        recovery_hint: str = "",
    ):
        self.retry = retry
        self.user_message = user_message
        self.recovery_hint = recovery_hint


RECOVERY_STRATEGIES: Dict[ErrorType, RecoveryStrategy] = {
    ErrorType.NETWORK_TIMEOUT: RecoveryStrategy(
        retry=True,
        user_message="The council backend did not respond in time",
        recovery_hint="Send the message again",
    ),
    ErrorType.NETWORK_CONNECTION: RecoveryStrategy(
        retry=False,
        user_message="Cannot reach the council backend",
        recovery_hint="Make sure the backend is running and the API URL is correct",
    ),
    ErrorType.COUNCIL_NOT_FOUND: RecoveryStrategy(
        retry=False,
        user_message="Conversation not found",
        recovery_hint="Refresh the conversation list",
    ),
    ErrorType.COUNCIL_HTTP_ERROR: RecoveryStrategy(
        retry=True,
        user_message="The council backend returned an error",
        recovery_hint="Send the message again",
    ),
    ErrorType.COUNCIL_STREAM_ERROR: RecoveryStrategy(
        retry=True,
        user_message="The council run failed",
        recovery_hint="Send the message again",
    ),
    ErrorType.COUNCIL_RESPONSE_PARSE: RecoveryStrategy(
        retry=True,
        user_message="Failed to parse the council response",
        recovery_hint="Send the message again",
    ),
    ErrorType.ATTACHMENT_READ: RecoveryStrategy(
        retry=False,
        user_message="Failed to load images. Please try again.",
        recovery_hint="Choose the images again",
    ),
    ErrorType.FILE_NOT_FOUND: RecoveryStrategy(
        retry=False,
        user_message="File not found",
        recovery_hint="Check the file path",
    ),
    ErrorType.FILE_PERMISSION: RecoveryStrategy(
        retry=False,
        user_message="File permission denied",
        recovery_hint="Check file permissions",
    ),
    ErrorType.MEMORY_OVERFLOW: RecoveryStrategy(
        retry=False,
        user_message="Out of memory",
        recovery_hint="Close other applications and restart",
    ),
    ErrorType.UNKNOWN: RecoveryStrategy(
        retry=False,
        user_message="An unexpected error occurred",
        recovery_hint="Check the log file for details",
    ),
}


__all__ = [
    "ErrorCategory",
    "ErrorType",
    "RecoveryStrategy",
    "ERROR_CATEGORY_MAP",
    "RECOVERY_STRATEGIES",
]
