"""
默认设置常量定义

职责：定义系统级默认配置值，作为配置缺失时的回退
设计原则：纯常量定义，无业务逻辑，便于全局引用
"""

from pathlib import Path

# ============================================================
# 应用信息
# ============================================================

APP_NAME = "LLM Council"
APP_ORGANIZATION = "llm-council"
APP_VERSION = "0.1.0"

# ============================================================
# 议会后端相关默认值
# ============================================================

DEFAULT_API_BASE_URL = "http://localhost:8001"   # 后端默认地址
API_BASE_URL_ENV = "LLM_COUNCIL_API_URL"         # 覆盖后端地址的环境变量
DEFAULT_REQUEST_TIMEOUT = 30                     # 普通请求超时秒数
DEFAULT_STREAM_TIMEOUT = 600                     # 流式请求读超时秒数（三阶段总耗时）
DEFAULT_CONNECT_TIMEOUT = 10                     # 连接超时秒数

# 后端路由
API_CONVERSATIONS_PATH = "/api/conversations"
API_MESSAGE_STREAM_SUFFIX = "/message/stream"

# ============================================================
# 附件相关默认值
# ============================================================

# 文件选择对话框过滤器
IMAGE_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp *.bmp)"

# 无法识别 MIME 类型时使用
DEFAULT_IMAGE_MIME_TYPE = "application/octet-stream"

# 预览缩略图尺寸（像素）
ATTACHMENT_THUMBNAIL_SIZE = 64

# 消息中内联图片的最大宽度（像素）
INLINE_IMAGE_MAX_WIDTH = 320

# ============================================================
# 文件路径
# ============================================================

# 全局配置目录（用户主目录下）
GLOBAL_CONFIG_DIR = Path.home() / ".llm_council"

# 全局配置文件
GLOBAL_CONFIG_FILE = GLOBAL_CONFIG_DIR / "config.json"

# 全局日志目录
GLOBAL_LOG_DIR = GLOBAL_CONFIG_DIR / "logs"

# ============================================================
# 界面相关默认值
# ============================================================

DEFAULT_LANGUAGE = "en_US"
SUPPORTED_LANGUAGES = ["en_US", "zh_CN"]

DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 800
SIDEBAR_WIDTH = 260

# ============================================================
# 日志相关默认值
# ============================================================

DEFAULT_LOG_LEVEL = "INFO"

# ============================================================
# 配置字段名常量（用于 ConfigManager 访问）
# ============================================================

CONFIG_LANGUAGE = "language"
CONFIG_API_BASE_URL = "api_base_url"
CONFIG_REQUEST_TIMEOUT = "request_timeout"
CONFIG_STREAM_TIMEOUT = "stream_timeout"
CONFIG_LOG_LEVEL = "log_level"

# ============================================================
# 默认配置字典
# ============================================================

DEFAULT_CONFIG = {
    CONFIG_LANGUAGE: DEFAULT_LANGUAGE,
    CONFIG_API_BASE_URL: DEFAULT_API_BASE_URL,
    CONFIG_REQUEST_TIMEOUT: DEFAULT_REQUEST_TIMEOUT,
    CONFIG_STREAM_TIMEOUT: DEFAULT_STREAM_TIMEOUT,
    CONFIG_LOG_LEVEL: DEFAULT_LOG_LEVEL,
}
