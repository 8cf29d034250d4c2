# Theme - Global Color Definitions
"""
主题配色定义

职责：
- 定义全局色彩规范，供 QSS 样式表和组件使用
- 仅实现浅色主题，主色为白色，副色为浅蓝色点缀
"""

from typing import Dict


# ============================================================
# 基础色彩
# ============================================================

COLOR_BG_PRIMARY = "#ffffff"      # 主背景
COLOR_BG_SECONDARY = "#f8f9fa"    # 面板背景（侧边栏、助手消息）
COLOR_BG_TERTIARY = "#f0f0f0"     # 第三级背景（标签页、代码块）

COLOR_BORDER = "#e0e0e0"
COLOR_BORDER_LIGHT = "#eeeeee"

COLOR_TEXT_PRIMARY = "#333333"
COLOR_TEXT_SECONDARY = "#666666"
COLOR_TEXT_TERTIARY = "#888888"
COLOR_TEXT_DISABLED = "#aaaaaa"


# ============================================================
# 强调色（浅蓝色系）
# ============================================================

COLOR_ACCENT = "#4a9eff"
COLOR_ACCENT_HOVER = "#3d8ce6"
COLOR_ACCENT_PRESSED = "#2d7cd6"
COLOR_ACCENT_LIGHT = "#e3f2fd"    # 用户消息背景、选中项
COLOR_ACCENT_LIGHTER = "#f0f7ff"  # 悬停高亮


# ============================================================
# 状态色
# ============================================================

COLOR_SUCCESS = "#4caf50"
COLOR_SUCCESS_LIGHT = "#e8f5e9"   # 最终答案背景
COLOR_WARNING = "#ff9800"
COLOR_ERROR = "#f44336"
COLOR_ERROR_LIGHT = "#ffebee"
COLOR_DISABLED = "#bdbdbd"


# ============================================================
# 阶段配色
# ============================================================

COLOR_STAGE_TITLE = "#2d3748"
COLOR_STAGE_BORDER = COLOR_BORDER
COLOR_STAGE3_BG = COLOR_SUCCESS_LIGHT
COLOR_STAGE3_BORDER = "#c8e6c9"
COLOR_RANK_POSITION = COLOR_ACCENT_PRESSED


# ============================================================
# 字体规范
# ============================================================

FONT_FAMILY_UI = "Segoe UI, SF Pro Display, Roboto, Microsoft YaHei UI, sans-serif"
FONT_FAMILY_CODE = "JetBrains Mono, Cascadia Code, Fira Code, SF Mono, Consolas, monospace"

FONT_SIZE_SMALL = 11
FONT_SIZE_NORMAL = 13
FONT_SIZE_TITLE = 16
FONT_SIZE_LARGE_TITLE = 18


# ============================================================
# 尺寸规范
# ============================================================

BORDER_RADIUS_SMALL = 4
BORDER_RADIUS_NORMAL = 6
BORDER_RADIUS_LARGE = 8

SPACING_SMALL = 4
SPACING_NORMAL = 8
SPACING_LARGE = 16

HEIGHT_BUTTON = 32


COLORS: Dict[str, str] = {
    "background": COLOR_BG_PRIMARY,
    "secondary": COLOR_BG_SECONDARY,
    "tertiary": COLOR_BG_TERTIARY,
    "border": COLOR_BORDER,
    "text": COLOR_TEXT_PRIMARY,
    "text_secondary": COLOR_TEXT_SECONDARY,
    "text_tertiary": COLOR_TEXT_TERTIARY,
    "accent": COLOR_ACCENT,
    "accent_hover": COLOR_ACCENT_HOVER,
    "accent_light": COLOR_ACCENT_LIGHT,
    "success_light": COLOR_SUCCESS_LIGHT,
    "error": COLOR_ERROR,
    "disabled": COLOR_DISABLED,
}


__all__ = [
    "COLOR_BG_PRIMARY",
    "COLOR_BG_SECONDARY",
    "COLOR_BG_TERTIARY",
    "COLOR_BORDER",
    "COLOR_BORDER_LIGHT",
    "COLOR_TEXT_PRIMARY",
    "COLOR_TEXT_SECONDARY",
    "COLOR_TEXT_TERTIARY",
    "COLOR_TEXT_DISABLED",
    "COLOR_ACCENT",
    "COLOR_ACCENT_HOVER",
    "COLOR_ACCENT_PRESSED",
    "COLOR_ACCENT_LIGHT",
    "COLOR_ACCENT_LIGHTER",
    "COLOR_SUCCESS",
    "COLOR_SUCCESS_LIGHT",
    "COLOR_WARNING",
    "COLOR_ERROR",
    "COLOR_ERROR_LIGHT",
    "COLOR_DISABLED",
    "COLOR_STAGE_TITLE",
    "COLOR_STAGE_BORDER",
    "COLOR_STAGE3_BG",
    "COLOR_STAGE3_BORDER",
    "COLOR_RANK_POSITION",
    "FONT_FAMILY_UI",
    "FONT_FAMILY_CODE",
    "FONT_SIZE_SMALL",
    "FONT_SIZE_NORMAL",
    "FONT_SIZE_TITLE",
    "FONT_SIZE_LARGE_TITLE",
    "BORDER_RADIUS_SMALL",
    "BORDER_RADIUS_NORMAL",
    "BORDER_RADIUS_LARGE",
    "SPACING_SMALL",
    "SPACING_NORMAL",
    "SPACING_LARGE",
    "HEIGHT_BUTTON",
    "COLORS",
]
