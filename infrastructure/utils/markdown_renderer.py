# Markdown Renderer
"""
Markdown 渲染器

职责：
- 将 Markdown 文本转换为 Qt 富文本可显示的 HTML
- 原始 HTML 按文本转义，不直接进入界面

使用示例：
    from infrastructure.utils.markdown_renderer import render_markdown

    html = render_markdown("**Response A** is the most accurate")
"""

from typing import Dict

import markdown
from markdown.extensions import Extension


# ============================================================
# 常量定义
# ============================================================

# 表格、围栏代码块、列表规则更接近 GitHub 风格
GFM_EXTENSIONS = [
    'fenced_code',
    'tables',
    'sane_lists',
]

# QLabel 只支持 CSS 子集，样式保持简单
MARKDOWN_STYLESHEET = """
p { margin: 0 0 6px 0; }
pre { background-color: #f5f5f5; padding: 6px; }
code { font-family: Consolas, "Courier New", monospace; background-color: #f5f5f5; }
table { border-collapse: collapse; }
th, td { border: 1px solid #e0e0e0; padding: 4px 8px; }
blockquote { color: #666666; margin-left: 8px; }
"""


class _EscapeRawHtml(Extension):
    """把原始 HTML 当作普通文本处理"""

    def extendMarkdown(self, md):
        md.preprocessors.deregister('html_block')
        md.inlinePatterns.deregister('html')


class MarkdownRenderer:
    """
    Markdown 渲染器

    gfm=True 时启用表格、围栏代码块和 sane_lists，并保留单个换行。
    """

    def __init__(self, gfm: bool = True):
        extensions = [_EscapeRawHtml()]
        if gfm:
            extensions.extend(GFM_EXTENSIONS)
            extensions.append('nl2br')
        self._md = markdown.Markdown(extensions=extensions, output_format='html')

    def render_markdown(self, text: str) -> str:
        if not text:
            return ""
        self._md.reset()
        return self._md.convert(text)

    def render_document(self, text: str) -> str:
        """渲染并附带样式表，用于 QLabel / QTextBrowser 富文本"""
        return f"<style>{MARKDOWN_STYLESHEET}</style>{self.render_markdown(text)}"


# ============================================================
# 便捷函数
# ============================================================

_renderers: Dict[bool, MarkdownRenderer] = {}


def get_renderer(gfm: bool = True) -> MarkdownRenderer:
    renderer = _renderers.get(gfm)
    if renderer is None:
        renderer = MarkdownRenderer(gfm=gfm)
        _renderers[gfm] = renderer
    return renderer


def render_markdown(text: str, gfm: bool = True) -> str:
    return get_renderer(gfm).render_markdown(text)


def render_document(text: str, gfm: bool = True) -> str:
    return get_renderer(gfm).render_document(text)


__all__ = [
    "MarkdownRenderer",
    "render_markdown",
    "render_document",
    "get_renderer",
]
