# Event Bus - Publish-Subscribe Communication
"""
事件总线 - 发布-订阅模式的跨组件通信

职责：
- 解耦会话层与界面层
- handler 在主线程执行

初始化顺序：
- Phase 0.3，ServiceLocator 之后，创建并注册到 ServiceLocator

设计原则：
- publish() 可从任意线程调用，非主线程时通过 Qt 队列切换到主线程
- 单个 handler 异常不影响其他订阅者

使用示例：
    from shared.event_bus import EventBus
    from shared.event_types import EVENT_CONVERSATION_UPDATED

    def on_conversation_updated(event):
        conversation_id = event["data"]["conversation_id"]

    event_bus.subscribe(EVENT_CONVERSATION_UPDATED, on_conversation_updated)
    event_bus.publish(EVENT_CONVERSATION_UPDATED, {"conversation_id": "abc"})
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List

from PyQt6.QtCore import QObject, QMetaObject, Qt, pyqtSlot
from PyQt6.QtWidgets import QApplication

from shared.event_types import CRITICAL_EVENTS


# 事件处理器类型
EventHandler = Callable[[Dict[str, Any]], None]

# 关键事件 handler 超时阈值（毫秒）
CRITICAL_HANDLER_THRESHOLD_MS = 500


class EventBusReceiver(QObject):
    """事件接收器 - 在主线程中执行排队的 handler"""

    def __init__(self):
        super().__init__()
        self._pending_events: List[tuple] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger("event_bus")

    @pyqtSlot()
    def process_pending_events(self):
        with self._lock:
            events = self._pending_events
            self._pending_events = []

        for handler, event_data, event_type in events:
            self.execute_handler(handler, event_data, event_type)

    def queue_event(self, handler: EventHandler, event_data: Dict, event_type: str):
        with self._lock:
            self._pending_events.append((handler, event_data, event_type))

    def execute_handler(self, handler: EventHandler, event_data: Dict, event_type: str):
        """执行单个 handler（异常隔离）"""
        handler_name = getattr(handler, "__name__", repr(handler))
        start_time = time.time()
        try:
            handler(event_data)
        except Exception as e:
            self._logger.exception(
                f"Handler '{handler_name}' failed for event '{event_type}': {e}"
            )
        finally:
            duration_ms = (time.time() - start_time) * 1000
            if event_type in CRITICAL_EVENTS and duration_ms > CRITICAL_HANDLER_THRESHOLD_MS:
                self._logger.warning(
                    f"Handler '{handler_name}' for critical event '{event_type}' "
                    f"took {duration_ms:.0f}ms"
                )


class EventBus:
    """
    事件总线

    线程安全说明：
    - 订阅列表使用 threading.Lock 保护
    - 主线程或无 QApplication（测试场景）时直接执行 handler
    - 其他线程发布时排队，通过 QMetaObject.invokeMethod 切换到主线程
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._receiver = EventBusReceiver()
        self._logger = logging.getLogger("event_bus")
        self._debug = False
        self._published_count = 0

    def set_debug(self, enabled: bool):
        self._debug = enabled

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        订阅事件

        Args:
            event_type: 事件类型（使用 event_types.py 中的常量）
            handler: 事件处理函数，签名为 (event: Dict) -> None
        """
        if not callable(handler):
            raise ValueError(f"Handler must be callable: {handler}")

        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                if self._debug:
                    self._logger.debug(
                        f"Subscribed '{getattr(handler, '__name__', handler)}' to '{event_type}'"
                    )

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        with self._lock:
            handlers = self._subscribers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)
                return True
        return False

    def publish(self, event_type: str, data: Any = None, source: str = None) -> None:
        """
        发布事件

        Args:
            event_type: 事件类型
            data: 事件数据（可选）
            source: 发布者标识（可选）
        """
        event_data = {
            "type": event_type,
            "data": data,
            "timestamp": time.time(),
            "source": source,
        }

        with self._lock:
            handlers = list(self._subscribers.get(event_type, []))

        if not handlers:
            return

        self._published_count += 1
        if self._debug:
            self._logger.debug(f"Publishing '{event_type}' to {len(handlers)} handlers")

        if (
            QApplication.instance() is None
            or threading.current_thread() is threading.main_thread()
        ):
            for handler in handlers:
                self._receiver.execute_handler(handler, event_data, event_type)
        else:
            for handler in handlers:
                self._receiver.queue_event(handler, event_data, event_type)
            QMetaObject.invokeMethod(
                self._receiver,
                "process_pending_events",
                Qt.ConnectionType.QueuedConnection,
            )

    def get_subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, []))

    def clear_all(self) -> None:
        """清空所有订阅（仅用于测试）"""
        with self._lock:
            self._subscribers.clear()

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            event_types = len(self._subscribers)
        return {
            "total_published": self._published_count,
            "event_types": event_types,
        }


__all__ = [
    "EventBus",
    "EventHandler",
]
