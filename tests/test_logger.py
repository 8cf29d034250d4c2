"""日志工具：敏感信息过滤与截断"""

from infrastructure.utils.logger import (
    sanitize_message,
    set_console_level,
    truncate_content,
)


def test_inline_image_data_is_shortened():
    message = "content=data:image/png;base64," + "A" * 200
    assert sanitize_message(message) == "content=data:image/png;base64,..."


def test_short_data_url_is_kept():
    message = "data:image/png;base64,AAAA"
    assert sanitize_message(message) == message


def test_bearer_token_is_redacted():
    message = "header Bearer abcdefghijklmnopqrstuvwxyz0123"
    assert sanitize_message(message) == "header Bearer ***REDACTED***"


def test_truncate_content():
    assert truncate_content("short") == "short"
    assert truncate_content("x" * 120, max_length=10) == "x" * 10 + "...[truncated]"


def test_unknown_log_level_rejected():
    assert not set_console_level("chatty")
    assert set_console_level("debug")
