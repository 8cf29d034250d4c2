"""
统一日志管理器

职责：配置和管理应用日志系统，提供统一的日志规范和敏感信息过滤

初始化顺序：Phase 0.1，最先初始化，其他模块都依赖日志

使用方式：
    from infrastructure.utils.logger import setup_logger, get_logger

    # 程序启动时初始化
    setup_logger()

    # 在各模块中获取日志器
    logger = get_logger("council_client")
    logger.info("对话创建完成")

    # 记录后端调用日志
    log_api_call("POST", "/api/conversations", 200, duration_ms=35)
"""

import logging
import re
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from infrastructure.config.settings import GLOBAL_LOG_DIR


# ============================================================
# 模块级状态变量
# ============================================================

_initialized: bool = False
_lock = threading.Lock()
_console_handler: Optional[logging.Handler] = None

# 敏感信息匹配模式
_SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([a-zA-Z0-9_\-\.]{20,})', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(Authorization["\']?\s*:\s*["\']?)([^"\']+)(["\']?)', re.IGNORECASE), r'\1***REDACTED***\3'),
    # 图片 data URL 只保留前缀，避免把整张图片写进日志
    (re.compile(r'(data:[\w/+.-]+;base64,)[A-Za-z0-9+/=]{64,}'), r'\1...'),
]

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET_COLOR = '\033[0m'

_LOG_FORMAT = '[%(asctime)s] [%(levelname)-8s] [%(name)-20s] %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# ============================================================
# 自定义格式化器
# ============================================================

class SensitiveInfoFilter(logging.Filter):
    """过滤日志消息中的敏感信息和大段 base64 数据"""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = sanitize_message(str(record.msg))
        if record.args:
            record.args = tuple(
                sanitize_message(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


class ColoredFormatter(logging.Formatter):
    """
    彩色日志格式化器（用于控制台输出）

    格式：[时间] [级别] [模块名] 消息
    """

    def __init__(self, use_color: bool = True):
        self.use_color = use_color
        super().__init__(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if len(record.name) > 20:
            record.name = record.name[:17] + '...'

        formatted = super().format(record)

        if self.use_color and sys.stdout.isatty():
            color = _LEVEL_COLORS.get(record.levelname, '')
            if color:
                formatted = f"{color}{formatted}{_RESET_COLOR}"
        return formatted


# ============================================================
# 核心功能
# ============================================================

def setup_logger(
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_dir: Optional[Path] = None
) -> None:
    """
    初始化日志系统

    配置控制台和文件输出（app.log 按大小轮转），设置敏感信息过滤

    Args:
        console_level: 控制台日志级别，默认 INFO
        file_level: 文件日志级别，默认 DEBUG
        log_dir: 日志目录，默认使用 GLOBAL_LOG_DIR
    """
    global _initialized, _console_handler

    with _lock:
        if _initialized:
            return

        if log_dir is None:
            log_dir = GLOBAL_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        root_logger.handlers.clear()

        sensitive_filter = SensitiveInfoFilter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(ColoredFormatter(use_color=True))
        console_handler.addFilter(sensitive_filter)
        root_logger.addHandler(console_handler)
        _console_handler = console_handler

        file_handler = RotatingFileHandler(
            log_dir / "app.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(ColoredFormatter(use_color=False))
        file_handler.addFilter(sensitive_filter)
        root_logger.addHandler(file_handler)

        # httpx 每个请求都会输出 INFO，降到 WARNING
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

        _initialized = True

    logging.getLogger("logger").info(f"Logging initialized, log dir: {log_dir}")


def set_console_level(level_name: str) -> bool:
    """
    按名称调整控制台日志级别（配置项 log_level）

    Returns:
        级别名称是否有效；无效时保持原级别
    """
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        logging.getLogger("logger").warning(f"Unknown log level: {level_name}")
        return False
    if _console_handler is not None:
        _console_handler.setLevel(level)
    return True


def get_logger(name: str) -> logging.Logger:
    """
    获取命名日志器

    日志系统未初始化时会自动初始化
    """
    if not _initialized:
        setup_logger()
    return logging.getLogger(name)


# ============================================================
# 敏感信息过滤
# ============================================================

def sanitize_message(message: str) -> str:
    """替换敏感内容为 ***REDACTED***，截短内联图片数据"""
    if not message:
        return message

    result = message
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def truncate_content(content: str, max_length: int = 100, suffix: str = "...[truncated]") -> str:
    """
    截断过长的内容

    用于日志中截断用户输入、模型回答等
    """
    if not content or len(content) <= max_length:
        return content
    return content[:max_length] + suffix


def log_api_call(
    method: str,
    endpoint: str,
    status_code: int,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None
) -> None:
    """
    记录后端调用日志

    格式：[API] method=POST endpoint=/api/... status=200 duration=12ms
    """
    logger = logging.getLogger("api")

    parts = [
        f"[API] method={method}",
        f"endpoint={endpoint}",
        f"status={status_code}",
    ]
    if duration_ms is not None:
        parts.append(f"duration={duration_ms:.0f}ms")
    if error:
        parts.append(f"error={sanitize_message(error)}")

    if status_code >= 400:
        logger.warning(" ".join(parts))
    else:
        logger.info(" ".join(parts))


__all__ = [
    "setup_logger",
    "get_logger",
    "set_console_level",
    "sanitize_message",
    "truncate_content",
    "log_api_call",
    "SensitiveInfoFilter",
]
