"""议会后端客户端（httpx.MockTransport 模拟后端）"""

import asyncio
import json

import httpx
import pytest

from infrastructure.council_api.council_client import (
    CouncilApiError,
    CouncilClient,
    CouncilConnectionError,
    create_council_client,
)
from infrastructure.config.config_manager import ConfigManager


SSE_BODY = "\n".join([
    'data: {"type": "stage1_start"}',
    "",
    'data: {"type": "stage1_complete", "data": [{"model": "m", "response": "r"}]}',
    "",
    ": keep-alive comment",
    "data: not json",
    'data: {"no_type": true}',
    'data: {"type": "complete"}',
    "",
])


def _client(handler):
    return CouncilClient("http://council.test/", transport=httpx.MockTransport(handler))


def _collect(client, conversation_id, content):
    async def run():
        events = [e async for e in client.send_message_stream(conversation_id, content)]
        await client.close()
        return events
    return asyncio.run(run())


def test_list_conversations():
    def handler(request):
        assert request.method == "GET"
        assert request.url.path == "/api/conversations"
        return httpx.Response(200, json=[{"id": "c1", "title": "T", "message_count": 2}])

    result = asyncio.run(_client(handler).list_conversations())
    assert result == [{"id": "c1", "title": "T", "message_count": 2}]


def test_create_and_get_conversation():
    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"id": "new", "messages": []})
        return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})

    async def run():
        client = _client(handler)
        created = await client.create_conversation()
        fetched = await client.get_conversation("abc")
        await client.close()
        return created, fetched

    created, fetched = asyncio.run(run())
    assert created["id"] == "new"
    assert fetched == {"id": "abc"}


def test_not_found_carries_status_code():
    client = _client(lambda request: httpx.Response(404, json={"detail": "missing"}))

    with pytest.raises(CouncilApiError) as exc_info:
        asyncio.run(client.get_conversation("gone"))
    assert exc_info.value.status_code == 404


def test_stream_parses_only_typed_data_lines():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            text=SSE_BODY,
            headers={"Content-Type": "text/event-stream"},
        )

    content = [{"type": "text", "text": "hi"}]
    events = _collect(_client(handler), "c1", content)

    assert [e["type"] for e in events] == ["stage1_start", "stage1_complete", "complete"]
    assert events[1]["data"] == [{"model": "m", "response": "r"}]
    assert seen == {
        "path": "/api/conversations/c1/message/stream",
        "body": {"content": content},
    }


def test_stream_http_error():
    client = _client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(CouncilApiError) as exc_info:
        _collect(client, "c1", "hi")
    assert exc_info.value.status_code == 500


def test_connection_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(CouncilConnectionError):
        asyncio.run(_client(handler).list_conversations())


def test_create_from_config(tmp_path, monkeypatch):
    monkeypatch.delenv("LLM_COUNCIL_API_URL", raising=False)
    config = ConfigManager(tmp_path / "config.json")
    config.load_config()
    config.set("api_base_url", "http://example.test:9000/")
    config.set("stream_timeout", 42)

    client = create_council_client(config)

    assert client.base_url == "http://example.test:9000"
    assert client.stream_timeout == 42.0
