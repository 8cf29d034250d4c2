# Error Handler - Unified Error Management
"""
统一错误处理器 - 集中管理应用错误的分类、日志和用户提示

职责：
- 错误分类（主分类 + 子分类）
- 错误日志记录
- 发布错误事件
- 用户提示（由 UI 层注册回调）

初始化顺序：
- Phase 1.2，依赖 Logger、EventBus（延迟获取）

设计原则：
- 延迟获取 EventBus，避免初始化顺序问题
- 内部错误处理不递归调用自身
- 内部错误信息使用硬编码英文，不依赖 I18nManager

使用示例：
    from shared.error_handler import ErrorHandler

    error_handler = ErrorHandler()

    try:
        await client.create_conversation()
    except CouncilApiError as e:
        error_handler.handle_error(e, context={"operation": "create_conversation"})
"""

import logging
import traceback
from typing import Any, Callable, Dict, Optional, Tuple

from shared.error_types import (
    ErrorCategory,
    ErrorType,
    RecoveryStrategy,
    ERROR_CATEGORY_MAP,
    RECOVERY_STRATEGIES,
)
from shared.event_types import EVENT_ERROR_OCCURRED


class ErrorHandler:
    """
    统一错误处理器

    循环依赖防护：
    - 延迟获取 EventBus
    - 维护 _is_handling 标志位防止递归
    """

    def __init__(self):
        self._event_bus = None
        self._logger = logging.getLogger("error_handler")
        self._is_handling = False
        # 用户通知回调（由 UI 层设置）
        self._notify_callback: Optional[Callable] = None

    @property
    def event_bus(self):
        """延迟获取 EventBus"""
        if self._event_bus is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_EVENT_BUS
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus

    # ============================================================
    # 核心功能
    # ============================================================

    def handle_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        category: Optional[ErrorCategory] = None,
        notify: bool = True,
    ) -> Tuple[ErrorCategory, ErrorType, RecoveryStrategy]:
        """
        统一错误处理入口

        Args:
            error: 异常对象
            context: 错误上下文信息（操作名、对话 ID 等）
            category: 强制指定的错误分类（可选）
            notify: 是否调用 UI 通知回调；调用方自行提示用户时传 False

        Returns:
            Tuple[ErrorCategory, ErrorType, RecoveryStrategy]: 分类结果和恢复策略
        """
        unknown = (
            ErrorCategory.USER_ACTIONABLE,
            ErrorType.UNKNOWN,
            RECOVERY_STRATEGIES[ErrorType.UNKNOWN],
        )
        if self._is_handling:
            self._logger.warning(f"Recursive error handling detected: {error}")
            return unknown

        self._is_handling = True
        context = context or {}

        try:
            error_category, error_type = self.classify_error(error)
            if category is not None:
                error_category = category

            strategy = self.get_recovery_strategy(error_type)
            self.log_error(error, context, error_type, error_category)
            self._publish_error_event(error, error_type, error_category, strategy, context)
            if notify:
                self.notify_user(error, error_category, error_type, strategy)
            return error_category, error_type, strategy

        except Exception as internal_error:
            self._logger.critical(f"Internal error in handle_error: {internal_error}")
            return unknown
        finally:
            self._is_handling = False

    def classify_error(self, error: Exception) -> Tuple[ErrorCategory, ErrorType]:
        error_type = self._detect_error_type(error)
        error_category = ERROR_CATEGORY_MAP.get(error_type, ErrorCategory.USER_ACTIONABLE)
        return error_category, error_type

    def _detect_error_type(self, error: Exception) -> ErrorType:
        """根据异常类型、状态码和消息检测错误类型"""
        error_str = str(error).lower()
        error_class = type(error).__name__

        status_code = getattr(error, "status_code", None)
        if status_code == 404:
            return ErrorType.COUNCIL_NOT_FOUND
        if status_code is not None:
            return ErrorType.COUNCIL_HTTP_ERROR

        if error_class == "AttachmentReadError":
            return ErrorType.ATTACHMENT_READ
        if error_class == "CouncilStreamError":
            return ErrorType.COUNCIL_STREAM_ERROR

        if "timeout" in error_str or "timed out" in error_str or "Timeout" in error_class:
            return ErrorType.NETWORK_TIMEOUT
        if error_class in ("ConnectError", "CouncilConnectionError") or (
            "connection" in error_str and ("refused" in error_str or "failed" in error_str)
        ):
            return ErrorType.NETWORK_CONNECTION
        if error_class == "JSONDecodeError" or ("json" in error_str and "decode" in error_str):
            return ErrorType.COUNCIL_RESPONSE_PARSE

        if error_class == "FileNotFoundError" or "no such file" in error_str:
            return ErrorType.FILE_NOT_FOUND
        if error_class == "PermissionError" or "permission denied" in error_str:
            return ErrorType.FILE_PERMISSION
        if error_class == "MemoryError":
            return ErrorType.MEMORY_OVERFLOW

        return ErrorType.UNKNOWN

    def get_recovery_strategy(self, error_type: ErrorType) -> RecoveryStrategy:
        return RECOVERY_STRATEGIES.get(error_type, RECOVERY_STRATEGIES[ErrorType.UNKNOWN])

    def log_error(
        self,
        error: Exception,
        context: Dict[str, Any],
        error_type: ErrorType,
        error_category: ErrorCategory,
    ):
        """统一错误日志记录，日志级别随分类变化"""
        context_str = ", ".join(f"{k}={v}" for k, v in context.items()) if context else "none"
        tb_str = "".join(traceback.format_exception(type(error), error, error.__traceback__))

        log_message = (
            f"Error occurred:\n"
            f"  Type: {error_type.value}\n"
            f"  Category: {error_category.name}\n"
            f"  Message: {error}\n"
            f"  Context: {context_str}\n"
            f"  Traceback:\n{tb_str}"
        )

        if error_category == ErrorCategory.FATAL:
            self._logger.critical(log_message)
        elif error_category == ErrorCategory.USER_ACTIONABLE:
            self._logger.error(log_message)
        else:
            self._logger.warning(log_message)

    def notify_user(
        self,
        error: Exception,
        error_category: ErrorCategory,
        error_type: ErrorType,
        strategy: RecoveryStrategy,
    ):
        """
        统一用户提示

        无 UI 回调时仅记录日志。
        """
        if self._notify_callback is None:
            return

        try:
            self._notify_callback(
                error_category=error_category,
                error_type=error_type,
                message=strategy.user_message,
                hint=strategy.recovery_hint,
                error=error,
            )
        except Exception as e:
            self._logger.warning(f"Failed to notify user: {e}")

    def set_notify_callback(self, callback: Callable):
        """
        设置用户通知回调

        Args:
            callback: 签名为 (error_category, error_type, message, hint, error) -> None
        """
        self._notify_callback = callback

    def _publish_error_event(
        self,
        error: Exception,
        error_type: ErrorType,
        error_category: ErrorCategory,
        strategy: RecoveryStrategy,
        context: Dict[str, Any],
    ):
        if self.event_bus is None:
            return

        event_data = {
            "error_type": error_type.value,
            "error_category": error_category.name,
            "message": str(error),
            "recovery_hint": strategy.recovery_hint,
            "context": context,
            "recoverable": error_category == ErrorCategory.RECOVERABLE,
        }
        self.event_bus.publish(EVENT_ERROR_OCCURRED, event_data, source="error_handler")


__all__ = [
    "ErrorHandler",
]
