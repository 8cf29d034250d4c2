# Utilities
"""
工具函数模块

包含：
- logger.py: 统一日志管理器
- markdown_renderer.py: Markdown -> HTML
- data_url.py: 图片文件与 data URL 互转
"""

from .logger import (
    setup_logger,
    get_logger,
    set_console_level,
    sanitize_message,
    truncate_content,
    log_api_call,
)

from .markdown_renderer import (
    MarkdownRenderer,
    render_markdown,
    render_document,
)

from .data_url import (
    AttachmentReadError,
    encode_data_url,
    decode_data_url,
    read_file_as_data_url,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "set_console_level",
    "sanitize_message",
    "truncate_content",
    "log_api_call",
    "MarkdownRenderer",
    "render_markdown",
    "render_document",
    "AttachmentReadError",
    "encode_data_url",
    "decode_data_url",
    "read_file_as_data_url",
]
