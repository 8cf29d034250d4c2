# Application Layer
"""
应用层 - 启动引导、议会会话服务

包含：
- bootstrap.py: 应用启动引导器（初始化编排）
- council_session.py: 议会会话服务（对话列表、发送消息、流式事件）
"""

from application.bootstrap import run
from application.council_session import (
    CouncilSession,
    CouncilStreamError,
)

__all__ = [
    "run",
    "CouncilSession",
    "CouncilStreamError",
]
