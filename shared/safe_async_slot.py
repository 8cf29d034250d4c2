# Safe Async Slot - Exception Capture Decorator for qasync
"""
qasync 异常捕获装饰器

职责：
- 确保异步槽函数的异常交给 ErrorHandler 处理（记录日志、发布事件、提示用户）

设计说明：
- qasync 的 @asyncSlot() 在协程抛出异常时只会输出到 stderr
- 两者配合使用，顺序为：@asyncSlot() 在外，@safe_async_slot() 在内

使用示例：
    from qasync import asyncSlot
    from shared.safe_async_slot import safe_async_slot

    class MainWindow(QMainWindow):
        @asyncSlot()
        @safe_async_slot()
        async def _on_new_conversation_clicked(self):
            await self.session.create_conversation()
"""

import asyncio
import functools
import logging
from typing import Any, Callable, TypeVar

F = TypeVar('F', bound=Callable[..., Any])

_logger = logging.getLogger("safe_async_slot")


def safe_async_slot(*args, reraise: bool = False):
    """
    与 @asyncSlot 配合使用的异常捕获装饰器

    Args:
        reraise: 交给 ErrorHandler 后是否重新抛出

    支持 @safe_async_slot 和 @safe_async_slot() 两种写法。
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*call_args, **kwargs):
            try:
                return await func(*call_args, **kwargs)
            except asyncio.CancelledError:
                _logger.debug(f"Async slot '{func.__name__}' was cancelled")
                raise
            except Exception as e:
                _handle_slot_error(func.__name__, e)
                if reraise:
                    raise

        return wrapper  # type: ignore

    if len(args) == 1 and callable(args[0]):
        return decorator(args[0])
    return decorator


def _handle_slot_error(func_name: str, error: Exception) -> None:
    from shared.service_locator import ServiceLocator
    from shared.service_names import SVC_ERROR_HANDLER

    error_handler = ServiceLocator.get_optional(SVC_ERROR_HANDLER)
    if error_handler is None:
        _logger.exception(f"Error in async slot '{func_name}': {error}")
        return
    error_handler.handle_error(error, context={"slot": func_name})


__all__ = ["safe_async_slot"]
