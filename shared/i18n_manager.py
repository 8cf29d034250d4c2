# I18n Manager - Internationalization Management
"""
国际化管理器 - 统一管理多语言文本和语言切换

职责：
- 从 resources/i18n/ 下的 JSON 文件加载多语言文本
- 提供多语言文本获取接口
- 语言切换时通过 EventBus 通知界面刷新

初始化顺序：
- Phase 1.3，依赖 ConfigManager（读取 language 配置）

使用示例：
    from shared.i18n_manager import I18nManager

    i18n = I18nManager()
    title = i18n.get_text("app.title")
    chairman = i18n.get_text("stage3.chairman", model="gemini-pro")
    i18n.set_language("zh_CN")
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from resources.resource_loader import get_i18n_dir
from shared.event_types import EVENT_LANGUAGE_CHANGED


# ============================================================
# 支持的语言
# ============================================================

LANG_EN_US = "en_US"
LANG_ZH_CN = "zh_CN"

SUPPORTED_LANGUAGES = [LANG_EN_US, LANG_ZH_CN]

LANGUAGE_NAMES = {
    LANG_EN_US: "English",
    LANG_ZH_CN: "简体中文",
}


class I18nManager:
    """
    国际化管理器

    设计原则：
    - 延迟获取 ConfigManager 和 EventBus
    - 当前语言缺少的键回退到英文
    - 键不存在时返回 default 或键名本身，便于调试
    - 支持变量占位符 {variable_name}
    """

    def __init__(self, i18n_dir: Optional[Path] = None):
        self._current_language = LANG_EN_US
        # 文本缓存：{lang_code: {key: text}}
        self._texts: Dict[str, Dict[str, str]] = {}
        self._i18n_dir = i18n_dir or get_i18n_dir()
        self._config_manager = None
        self._event_bus = None
        self._logger = logging.getLogger("i18n_manager")

        self._load_language_from_config()
        self._load_language_file(self._current_language)

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def config_manager(self):
        if self._config_manager is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_CONFIG_MANAGER
            self._config_manager = ServiceLocator.get_optional(SVC_CONFIG_MANAGER)
        return self._config_manager

    @property
    def event_bus(self):
        if self._event_bus is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_EVENT_BUS
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus

    # ============================================================
    # 文件加载
    # ============================================================

    def _load_language_file(self, lang_code: str) -> bool:
        """
        从 JSON 文件加载指定语言的文本

        Returns:
            bool: 是否加载成功
        """
        if lang_code in self._texts:
            return True

        file_path = self._i18n_dir / f"{lang_code}.json"
        if not file_path.exists():
            self._logger.warning(f"Language file not found: {file_path}")
            return False

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                texts = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self._logger.error(f"Failed to load language file {file_path}: {e}")
            return False

        if not isinstance(texts, dict):
            self._logger.error(f"Invalid language file format: {file_path}")
            return False

        self._texts[lang_code] = texts
        self._logger.info(f"Loaded language file: {file_path} ({len(texts)} keys)")
        return True

    def _load_language_from_config(self):
        if self.config_manager is None:
            return
        lang = self.config_manager.get("language")
        if lang in SUPPORTED_LANGUAGES:
            self._current_language = lang

    # ============================================================
    # 核心功能
    # ============================================================

    def get_text(self, key: str, default: Optional[str] = None, **kwargs: Any) -> str:
        """
        根据键名获取当前语言的文本

        Args:
            key: 文本键（如 "app.title"、"btn.send"）
            default: 键不存在时返回的默认值
            **kwargs: 变量占位符的值

        示例：
            get_text("placeholder.empty.title")  # -> "Start a conversation"
        """
        texts = self._texts.get(self._current_language, {})
        text = texts.get(key)

        if text is None and self._current_language != LANG_EN_US:
            self._load_language_file(LANG_EN_US)
            text = self._texts.get(LANG_EN_US, {}).get(key)

        if text is None:
            if default is not None:
                text = default
            else:
                self._logger.debug(f"Missing translation for key: {key}")
                return key

        if kwargs:
            try:
                text = text.format(**kwargs)
            except KeyError as e:
                self._logger.warning(f"Missing variable in text '{key}': {e}")

        return text

    def set_language(self, lang_code: str) -> bool:
        """
        切换语言

        加载语言文件、保存到配置，并发布 EVENT_LANGUAGE_CHANGED。
        """
        if lang_code not in SUPPORTED_LANGUAGES:
            self._logger.warning(f"Unsupported language: {lang_code}")
            return False

        if lang_code == self._current_language:
            return True

        if not self._load_language_file(lang_code):
            return False

        old_language = self._current_language
        self._current_language = lang_code
        self._logger.info(f"Language changed: {old_language} -> {lang_code}")

        if self.config_manager is not None:
            self.config_manager.set("language", lang_code)

        if self.event_bus is not None:
            self.event_bus.publish(
                EVENT_LANGUAGE_CHANGED,
                {"old_language": old_language, "new_language": lang_code},
                source="i18n_manager",
            )
        return True

    def get_current_language(self) -> str:
        return self._current_language

    def get_available_languages(self) -> List[Dict[str, str]]:
        return [
            {"code": code, "name": LANGUAGE_NAMES.get(code, code)}
            for code in SUPPORTED_LANGUAGES
        ]


__all__ = [
    "I18nManager",
    "LANG_EN_US",
    "LANG_ZH_CN",
    "SUPPORTED_LANGUAGES",
    "LANGUAGE_NAMES",
]
