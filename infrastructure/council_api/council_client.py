# Council Backend Client
"""
议会后端客户端

职责：
- 管理 httpx 异步客户端
- 对话列表 / 创建 / 获取
- 发送消息并以 SSE 流的形式接收三阶段进度事件

API 端点：
    GET  /api/conversations
    POST /api/conversations
    GET  /api/conversations/{id}
    POST /api/conversations/{id}/message/stream

流式响应格式（text/event-stream）：
    data: {"type": "stage1_start"}
    data: {"type": "stage1_complete", "data": [...]}
    ...
    data: {"type": "complete"}

使用示例：
    client = CouncilClient("http://localhost:8001")
    conversation = await client.create_conversation()
    async for event in client.send_message_stream(conversation["id"], "Hello"):
        print(event["type"])
    await client.close()
"""

import json
import logging
import time
from typing import Any, AsyncIterator, Dict, List, Optional, Union

import httpx

from infrastructure.config.settings import (
    API_CONVERSATIONS_PATH,
    API_MESSAGE_STREAM_SUFFIX,
    DEFAULT_API_BASE_URL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_STREAM_TIMEOUT,
)
from infrastructure.utils.logger import log_api_call


SSE_DATA_PREFIX = "data:"


# ============================================================
# 异常类型定义
# ============================================================

class CouncilApiError(Exception):
    """后端调用错误"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CouncilTimeoutError(CouncilApiError):
    """后端响应超时"""
    pass


class CouncilConnectionError(CouncilApiError):
    """无法连接后端"""
    pass


class CouncilClient:
    """
    议会后端客户端

    特性：
    - httpx.AsyncClient 延迟创建
    - 流式请求使用单独的较长读超时
    - 可注入 transport，便于测试
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        stream_timeout: float = DEFAULT_STREAM_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._logger = logging.getLogger("council_client")

    # ============================================================
    # httpx 客户端管理
    # ============================================================

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self.timeout, connect=DEFAULT_CONNECT_TIMEOUT),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ============================================================
    # 对话接口
    # ============================================================

    async def list_conversations(self) -> List[Dict[str, Any]]:
        """获取对话列表（仅元数据）"""
        result = await self._request_json("GET", API_CONVERSATIONS_PATH)
        if not isinstance(result, list):
            raise CouncilApiError("Unexpected conversation list payload")
        return result

    async def create_conversation(self) -> Dict[str, Any]:
        return await self._request_json("POST", API_CONVERSATIONS_PATH, json={})

    async def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        """获取完整对话（含所有轮次）"""
        return await self._request_json("GET", f"{API_CONVERSATIONS_PATH}/{conversation_id}")

    async def send_message_stream(
        self,
        conversation_id: str,
        content: Union[str, List[Dict[str, Any]]],
    ) -> AsyncIterator[Dict[str, Any]]:
        """
        发送消息并流式接收进度事件（异步生成器）

        Args:
            conversation_id: 对话 ID
            content: 线上格式的消息内容（字符串或内容块列表）

        Yields:
            Dict: 后端事件，至少包含 "type"

        Raises:
            CouncilApiError: HTTP 错误、超时或连接失败
        """
        path = f"{API_CONVERSATIONS_PATH}/{conversation_id}{API_MESSAGE_STREAM_SUFFIX}"
        client = self._get_client()
        start_time = time.time()
        response = None

        try:
            response = await client.send(
                client.build_request(
                    "POST",
                    path,
                    json={"content": content},
                    timeout=httpx.Timeout(self.stream_timeout, connect=DEFAULT_CONNECT_TIMEOUT),
                ),
                stream=True,
            )

            if response.status_code != 200:
                body = (await response.aread()).decode("utf-8", errors="replace")
                log_api_call("POST", path, response.status_code, error=body[:200])
                raise CouncilApiError(
                    f"Failed to send message: HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            log_api_call("POST", path, response.status_code, (time.time() - start_time) * 1000)

            async for line in response.aiter_lines():
                event = self._parse_sse_line(line)
                if event is not None:
                    yield event

        except httpx.TimeoutException as e:
            self._logger.error(f"Stream timeout: {e}")
            raise CouncilTimeoutError(f"Stream timeout: {e}") from e
        except httpx.RequestError as e:
            self._logger.error(f"Stream request error: {e}")
            raise CouncilConnectionError(f"Stream request error: {e}") from e
        finally:
            if response is not None:
                await response.aclose()

    # ============================================================
    # 内部方法
    # ============================================================

    async def _request_json(self, method: str, path: str, **kwargs) -> Any:
        client = self._get_client()
        start_time = time.time()

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise CouncilTimeoutError(f"Request timeout: {method} {path}: {e}") from e
        except httpx.RequestError as e:
            raise CouncilConnectionError(f"Request error: {method} {path}: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        log_api_call(method, path, response.status_code, duration_ms)

        if response.status_code >= 400:
            raise CouncilApiError(
                f"{method} {path} failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise CouncilApiError(f"Invalid JSON from {method} {path}: {e}") from e

    def _parse_sse_line(self, line: str) -> Optional[Dict[str, Any]]:
        """解析单行 SSE 数据；非 data 行、空行和无法解析的行返回 None"""
        line = line.strip()
        if not line.startswith(SSE_DATA_PREFIX):
            return None

        payload = line[len(SSE_DATA_PREFIX):].strip()
        if not payload:
            return None

        try:
            event = json.loads(payload)
        except json.JSONDecodeError as e:
            self._logger.warning(f"Skipping malformed stream event: {e}")
            return None

        if not isinstance(event, dict) or "type" not in event:
            self._logger.warning("Skipping stream event without a type")
            return None
        return event


def create_council_client(config_manager=None, **kwargs) -> CouncilClient:
    """
    根据配置创建客户端

    config_manager 为 None 时使用默认地址和超时。
    """
    if config_manager is None:
        return CouncilClient(**kwargs)
    return CouncilClient(
        base_url=config_manager.get_api_base_url(),
        timeout=config_manager.get_request_timeout(),
        stream_timeout=config_manager.get_stream_timeout(),
        **kwargs,
    )


__all__ = [
    "CouncilClient",
    "CouncilApiError",
    "CouncilTimeoutError",
    "CouncilConnectionError",
    "create_council_client",
]
