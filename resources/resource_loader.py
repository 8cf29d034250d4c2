# Resource Loader
"""
资源加载器

职责：
- 加载 QSS 样式表
- 提供资源路径获取

加载时机：
- 在 bootstrap.py 的 Phase 2.1 阶段调用
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import QApplication


_logger = logging.getLogger("resource_loader")


def get_resources_dir() -> Path:
    return Path(__file__).parent


def get_styles_dir() -> Path:
    return get_resources_dir() / "styles"


def get_i18n_dir() -> Path:
    return get_resources_dir() / "i18n"


def get_stylesheet() -> str:
    """读取主样式表内容，不存在时返回空字符串"""
    qss_path = get_styles_dir() / "main.qss"
    if not qss_path.exists():
        _logger.warning(f"Stylesheet not found: {qss_path}")
        return ""
    with open(qss_path, "r", encoding="utf-8") as f:
        return f.read()


def load_stylesheet(app: QApplication) -> bool:
    """
    加载主样式表到应用

    Returns:
        是否加载成功
    """
    try:
        stylesheet = get_stylesheet()
    except OSError as e:
        _logger.error(f"Failed to load stylesheet: {e}")
        return False

    if not stylesheet:
        return False
    app.setStyleSheet(stylesheet)
    return True


__all__ = [
    "get_resources_dir",
    "get_styles_dir",
    "get_i18n_dir",
    "get_stylesheet",
    "load_stylesheet",
]
