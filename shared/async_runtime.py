# LLM Council - Async Runtime
"""
qasync 融合事件循环

Qt 的事件循环与 asyncio 合并为一个循环，运行在主线程：
- 图片读取（asyncio.to_thread）和后端流式请求都以协程形式调度
- 协程恢复执行时总在主线程，可以直接修改控件和对话存储
- 槽函数通过 qasync.asyncSlot 启动协程

生命周期：
    loop = init_async_runtime(app)       # QApplication 创建之后
    run_until_quit(app, before_close)    # 阻塞到 aboutToQuit
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from PyQt6.QtWidgets import QApplication
from qasync import QEventLoop


# 退出时等待剩余任务结束的秒数
PENDING_TASK_GRACE_SECONDS = 5.0

_loop: Optional[QEventLoop] = None
_logger = logging.getLogger("async_runtime")


def init_async_runtime(app: QApplication) -> QEventLoop:
    """
    创建融合事件循环并设为当前 asyncio 循环

    Raises:
        RuntimeError: 重复初始化
    """
    global _loop

    if _loop is not None:
        raise RuntimeError("Async runtime is already initialized")

    _loop = QEventLoop(app)
    asyncio.set_event_loop(_loop)
    return _loop


async def _cancel_pending_tasks() -> int:
    current = asyncio.current_task()
    pending = [t for t in asyncio.all_tasks() if t is not current and not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.wait(pending, timeout=PENDING_TASK_GRACE_SECONDS)
    return len(pending)


def run_until_quit(
    app: QApplication,
    before_close: Optional[Callable[[], Awaitable[None]]] = None,
) -> None:
    """
    运行事件循环直到应用退出

    aboutToQuit 之后依次执行 before_close()、取消剩余任务、关闭异步生成器，
    最后关闭循环。
    """
    global _loop

    if _loop is None:
        raise RuntimeError("Async runtime is not initialized")

    quit_requested = asyncio.Event()
    app.aboutToQuit.connect(quit_requested.set)

    async def main() -> None:
        await quit_requested.wait()
        if before_close is not None:
            await before_close()
        cancelled = await _cancel_pending_tasks()
        if cancelled:
            _logger.info(f"Cancelled {cancelled} pending tasks on exit")
        await _loop.shutdown_asyncgens()

    try:
        with _loop:
            _loop.run_until_complete(main())
    finally:
        _loop = None


__all__ = [
    "init_async_runtime",
    "run_until_quit",
]
