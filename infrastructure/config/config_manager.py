"""
配置统一访问管理器

职责：提供配置的统一访问接口，管理配置的读写、校验和变更通知

初始化顺序：Phase 1.1，依赖 Logger，注册到 ServiceLocator

使用方式：
    config_manager = ConfigManager()
    config_manager.load_config()

    # 读取配置
    base_url = config_manager.get_api_base_url()

    # 写入配置（自动触发变更通知）
    config_manager.set("language", "zh_CN")
"""

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

from .settings import (
    API_BASE_URL_ENV,
    CONFIG_API_BASE_URL,
    CONFIG_LANGUAGE,
    CONFIG_REQUEST_TIMEOUT,
    CONFIG_STREAM_TIMEOUT,
    DEFAULT_CONFIG,
    GLOBAL_CONFIG_FILE,
    SUPPORTED_LANGUAGES,
)


class ConfigManager:
    """
    配置统一访问管理器

    提供配置的统一读写接口，禁止其他模块直接解析 config.json
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        初始化配置管理器

        注意：遵循延迟获取原则，不在 __init__ 中获取 ServiceLocator 服务
        """
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_file = Path(config_file) if config_file else GLOBAL_CONFIG_FILE
        self._lock = Lock()
        self._change_handlers: Dict[str, List[Callable]] = {}
        self._loaded = False
        self._logger = logging.getLogger("config_manager")
        self._event_bus = None

    @property
    def event_bus(self):
        """延迟获取 EventBus 服务"""
        if self._event_bus is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_EVENT_BUS
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ============================================================
    # 核心功能
    # ============================================================

    def load_config(self) -> bool:
        """
        加载配置文件

        缺失字段使用 settings.py 默认值；文件损坏时回退到默认配置。

        Returns:
            bool: 加载是否成功
        """
        with self._lock:
            try:
                if self._config_file.exists():
                    with open(self._config_file, "r", encoding="utf-8") as f:
                        loaded_config = json.load(f)
                    if not isinstance(loaded_config, dict):
                        raise ValueError("config root must be a JSON object")
                    self._config = {**DEFAULT_CONFIG, **loaded_config}
                else:
                    self._config = dict(DEFAULT_CONFIG)
                    self._save_config_internal()

                self._loaded = True
                self._logger.info(f"Config loaded from {self._config_file}")
                return True

            except (OSError, ValueError) as e:
                # json.JSONDecodeError 是 ValueError 的子类
                self._logger.error(f"Failed to load config, using defaults: {e}")
                self._config = dict(DEFAULT_CONFIG)
                self._loaded = True
                return False

    def save_config(self) -> bool:
        with self._lock:
            return self._save_config_internal()

    def _save_config_internal(self) -> bool:
        """内部保存方法（不加锁）"""
        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            self._logger.error(f"Failed to save config: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._config.get(key, default)

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        统一配置写入接口

        值变化时触发变更通知。
        """
        with self._lock:
            old_value = self._config.get(key)
            self._config[key] = value
            if save:
                self._save_config_internal()

        # 锁外执行，避免回调中再次读配置时死锁
        if old_value != value:
            self._notify_change(key, old_value, value)

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._config)

    # ============================================================
    # 后端访问配置
    # ============================================================

    def get_api_base_url(self) -> str:
        """
        获取后端基础地址

        环境变量 LLM_COUNCIL_API_URL 优先于配置文件；末尾的 "/" 会被去掉。
        """
        env_value = os.environ.get(API_BASE_URL_ENV, "").strip()
        base_url = env_value or self.get(CONFIG_API_BASE_URL) or DEFAULT_CONFIG[CONFIG_API_BASE_URL]
        return base_url.rstrip("/")

    def get_request_timeout(self) -> float:
        return float(self.get(CONFIG_REQUEST_TIMEOUT, DEFAULT_CONFIG[CONFIG_REQUEST_TIMEOUT]))

    def get_stream_timeout(self) -> float:
        return float(self.get(CONFIG_STREAM_TIMEOUT, DEFAULT_CONFIG[CONFIG_STREAM_TIMEOUT]))

    # ============================================================
    # 配置校验
    # ============================================================

    def validate_config(self) -> Tuple[bool, List[str]]:
        """
        校验配置有效性

        Returns:
            (是否有效, 错误信息列表)
        """
        errors = []

        with self._lock:
            for key in (CONFIG_REQUEST_TIMEOUT, CONFIG_STREAM_TIMEOUT):
                timeout = self._config.get(key, 0)
                if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                    errors.append(f"{key} must be greater than 0, got: {timeout}")

            base_url = self._config.get(CONFIG_API_BASE_URL, "")
            if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
                errors.append(f"{CONFIG_API_BASE_URL} must be an http(s) URL, got: {base_url}")

            language = self._config.get(CONFIG_LANGUAGE, "")
            if language and language not in SUPPORTED_LANGUAGES:
                errors.append(f"Unsupported language: {language}, supported: {SUPPORTED_LANGUAGES}")

        return len(errors) == 0, errors

    # ============================================================
    # 变更通知机制
    # ============================================================

    def subscribe_change(self, key: str, handler: Callable[[str, Any, Any], None]) -> None:
        """
        订阅特定配置项变更

        Args:
            key: 配置键名
            handler: 回调函数，签名为 handler(key, old_value, new_value)
        """
        with self._lock:
            self._change_handlers.setdefault(key, []).append(handler)

    def unsubscribe_change(self, key: str, handler: Callable) -> None:
        with self._lock:
            handlers = self._change_handlers.get(key, [])
            if handler in handlers:
                handlers.remove(handler)

    def _notify_change(self, key: str, old_value: Any, new_value: Any) -> None:
        with self._lock:
            handlers = list(self._change_handlers.get(key, []))

        for handler in handlers:
            try:
                handler(key, old_value, new_value)
            except Exception as e:
                self._logger.error(f"Config change handler failed: {e}")

        if self.event_bus is not None:
            from shared.event_types import EVENT_CONFIG_CHANGED
            self.event_bus.publish(
                EVENT_CONFIG_CHANGED,
                {"key": key, "old_value": old_value, "new_value": new_value},
                source="config_manager",
            )


__all__ = ["ConfigManager"]
