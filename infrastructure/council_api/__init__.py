# Council Backend API
"""
议会后端访问

包含：
- council_client - httpx 异步客户端与异常类型
"""

from infrastructure.council_api.council_client import (
    CouncilClient,
    CouncilApiError,
    CouncilTimeoutError,
    CouncilConnectionError,
    create_council_client,
)

__all__ = [
    "CouncilClient",
    "CouncilApiError",
    "CouncilTimeoutError",
    "CouncilConnectionError",
    "create_council_client",
]
