# Service Locator - Dependency Injection Container
"""
服务定位器 - 轻量级依赖注入容器

职责：
- 管理服务实例的注册与获取
- 解耦组件间的直接依赖

初始化顺序：
- Phase 0.2，Logger 之后创建空容器，后续各 Phase 逐步注册服务

使用示例：
    from shared.service_locator import ServiceLocator
    from shared.service_names import SVC_EVENT_BUS

    ServiceLocator.register(SVC_EVENT_BUS, event_bus)
    event_bus = ServiceLocator.get(SVC_EVENT_BUS)

    # 延迟获取模式（推荐）
    @property
    def event_bus(self):
        if self._event_bus is None:
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus
"""

from typing import Any, Dict, List, Optional


class ServiceNotFoundError(Exception):
    """服务未找到异常"""

    def __init__(self, service_name: str, message: Optional[str] = None):
        self.service_name = service_name
        if message is None:
            message = (
                f"Service '{service_name}' is not registered. "
                f"Check the bootstrap phase order or use get_optional()."
            )
        super().__init__(message)


class ServiceLocator:
    """
    服务定位器

    启动阶段注册，运行时只读；所有操作都在主线程进行，无需加锁。
    """

    _services: Dict[str, Any] = {}

    @classmethod
    def register(cls, name: str, service: Any) -> None:
        """
        注册服务实例

        重复注册同名服务会覆盖旧实例（测试场景使用）。

        Raises:
            ValueError: 服务名为空或服务实例为 None
        """
        if not name:
            raise ValueError("Service name must not be empty")
        if service is None:
            raise ValueError(f"Service instance must not be None: {name}")
        cls._services[name] = service

    @classmethod
    def get(cls, name: str) -> Any:
        """
        获取服务实例

        Raises:
            ServiceNotFoundError: 服务未注册
        """
        if name not in cls._services:
            raise ServiceNotFoundError(name)
        return cls._services[name]

    @classmethod
    def get_optional(cls, name: str) -> Optional[Any]:
        """获取服务实例，不存在时返回 None"""
        return cls._services.get(name)

    @classmethod
    def has(cls, name: str) -> bool:
        return name in cls._services

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._services.pop(name, None)

    @classmethod
    def clear(cls) -> None:
        """清空所有服务（仅用于测试）"""
        cls._services.clear()

    @classmethod
    def get_all_names(cls) -> List[str]:
        return list(cls._services.keys())


__all__ = [
    "ServiceLocator",
    "ServiceNotFoundError",
]
