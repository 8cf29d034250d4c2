# Resources Module
"""
UI 资源模块

包含：
- styles/: QSS 样式表
- i18n/: 多语言文本（en_US、zh_CN）
- theme.py: 主题配色定义
- resource_loader.py: 资源加载器
"""

from .theme import (
    COLOR_BG_PRIMARY,
    COLOR_BG_SECONDARY,
    COLOR_BORDER,
    COLOR_TEXT_PRIMARY,
    COLOR_TEXT_SECONDARY,
    COLOR_ACCENT,
    COLOR_ACCENT_LIGHT,
    FONT_FAMILY_UI,
    FONT_FAMILY_CODE,
    COLORS,
)

from .resource_loader import (
    load_stylesheet,
    get_stylesheet,
    get_i18n_dir,
)

__all__ = [
    "COLOR_BG_PRIMARY",
    "COLOR_BG_SECONDARY",
    "COLOR_BORDER",
    "COLOR_TEXT_PRIMARY",
    "COLOR_TEXT_SECONDARY",
    "COLOR_ACCENT",
    "COLOR_ACCENT_LIGHT",
    "FONT_FAMILY_UI",
    "FONT_FAMILY_CODE",
    "COLORS",
    "load_stylesheet",
    "get_stylesheet",
    "get_i18n_dir",
]
