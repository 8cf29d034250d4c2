"""议会会话服务：乐观发送、流式填充、失败回滚"""

import asyncio
from unittest import mock

import pytest

from application.council_session import CouncilSession, CouncilStreamError
from domain.conversation import PlainText
from infrastructure.council_api.council_client import CouncilConnectionError
from shared.event_bus import EventBus
from shared.event_types import (
    EVENT_CONVERSATION_LIST_UPDATED,
    EVENT_CONVERSATION_UPDATED,
    EVENT_COUNCIL_LOADING_CHANGED,
)
from shared.service_locator import ServiceLocator
from shared.service_names import SVC_ERROR_HANDLER, SVC_EVENT_BUS


class FakeClient:
    """按脚本回放流式事件的假后端"""

    def __init__(self, events=(), fail_after=None):
        self.events = list(events)
        self.fail_after = fail_after
        self.sent = []
        self.stream_closed = False

    async def list_conversations(self):
        return [
            {"id": "c1", "title": "First", "message_count": 2},
            {"title": "missing id"},
        ]

    async def create_conversation(self):
        return {"id": "new", "title": "New Conversation", "messages": []}

    async def get_conversation(self, conversation_id):
        return {"id": conversation_id, "title": "Loaded", "messages": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "stage1": [], "stage2": [], "stage3": {"response": "ok"}},
        ]}

    async def send_message_stream(self, conversation_id, content):
        self.sent.append((conversation_id, content))
        try:
            for index, event in enumerate(self.events):
                if self.fail_after is not None and index == self.fail_after:
                    raise CouncilConnectionError("connection dropped")
                await asyncio.sleep(0)
                yield event
            if self.fail_after is not None and self.fail_after >= len(self.events):
                raise CouncilConnectionError("connection dropped")
        finally:
            self.stream_closed = True

    async def close(self):
        pass


STREAM = [
    {"type": "stage1_start"},
    {"type": "stage1_complete", "data": [{"model": "m", "response": "r"}]},
    {"type": "stage2_start"},
    {"type": "stage2_complete", "data": [], "metadata": {"label_to_model": {}}},
    {"type": "stage3_start"},
    {"type": "stage3_complete", "data": {"model": "m", "response": "final"}},
    {"type": "title_complete", "data": {"title": "Renamed"}},
    {"type": "complete"},
]


@pytest.fixture
def events():
    bus = EventBus()
    ServiceLocator.register(SVC_EVENT_BUS, bus)
    received = []
    for event_type in (
        EVENT_CONVERSATION_UPDATED,
        EVENT_CONVERSATION_LIST_UPDATED,
        EVENT_COUNCIL_LOADING_CHANGED,
    ):
        bus.subscribe(event_type, received.append)
    return received


@pytest.fixture
def error_handler():
    handler = mock.Mock()
    ServiceLocator.register(SVC_ERROR_HANDLER, handler)
    return handler


def _loading_events(events):
    return [
        e["data"]["is_loading"]
        for e in events
        if e["type"] == EVENT_COUNCIL_LOADING_CHANGED
    ]


def test_refresh_conversations_skips_entries_without_id(events):
    session = CouncilSession(FakeClient())

    summaries = asyncio.run(session.refresh_conversations())

    assert [s.id for s in summaries] == ["c1"]
    assert events[-1]["type"] == EVENT_CONVERSATION_LIST_UPDATED


def test_create_conversation_becomes_current(events):
    session = CouncilSession(FakeClient())
    asyncio.run(session.refresh_conversations())

    conversation = asyncio.run(session.create_conversation())

    assert session.current_conversation is conversation
    assert [s.id for s in session.conversations] == ["new", "c1"]


def test_select_conversation_loads_turns(events):
    session = CouncilSession(FakeClient())

    conversation = asyncio.run(session.select_conversation("c9"))

    assert conversation.id == "c9"
    assert len(conversation.turns) == 2
    assert conversation.turns[1].stage3 == {"response": "ok"}


def test_send_without_conversation_returns_none():
    assert CouncilSession(FakeClient()).send_message(PlainText("hi")) is None


def test_send_message_full_stream(events, error_handler):
    client = FakeClient(STREAM)
    session = CouncilSession(client)

    async def run():
        await session.refresh_conversations()
        await session.select_conversation("c1")
        task = session.send_message(PlainText("question"))

        assert session.is_loading
        assert len(session.current_conversation.turns) == 4
        assert session.send_message(PlainText("again")) is None

        await task

    asyncio.run(run())

    conversation = session.current_conversation
    assistant = conversation.turns[-1]
    assert client.sent == [("c1", "question")]
    assert assistant.stage1 == [{"model": "m", "response": "r"}]
    assert assistant.stage3 == {"model": "m", "response": "final"}
    assert not assistant.loading.any()
    assert conversation.title == "Renamed"
    assert session.conversations[0].message_count == 4
    assert not session.is_loading
    assert _loading_events(events) == [True, False]
    error_handler.handle_error.assert_not_called()


def test_request_failure_rolls_back(events, error_handler):
    session = CouncilSession(FakeClient(STREAM, fail_after=2))

    async def run():
        await session.select_conversation("c1")
        await session.send_message(PlainText("question"))

    asyncio.run(run())

    assert len(session.current_conversation.turns) == 2
    assert not session.is_loading
    error = error_handler.handle_error.call_args.args[0]
    assert isinstance(error, CouncilConnectionError)


def test_backend_error_event_keeps_turns(events, error_handler):
    client = FakeClient([
        {"type": "stage1_start"},
        {"type": "error", "message": "All models failed"},
        {"type": "stage1_complete", "data": []},
    ])
    session = CouncilSession(client)

    async def run():
        await session.select_conversation("c1")
        await session.send_message(PlainText("question"))
        assert client.stream_closed

    asyncio.run(run())

    assistant = session.current_conversation.turns[-1]
    assert len(session.current_conversation.turns) == 4
    assert assistant.stage1 is None
    assert not session.is_loading
    error = error_handler.handle_error.call_args.args[0]
    assert isinstance(error, CouncilStreamError)
    assert str(error) == "All models failed"


def test_close_cancels_outstanding_send(events):
    class SlowClient(FakeClient):
        async def send_message_stream(self, conversation_id, content):
            await asyncio.sleep(10)
            yield {"type": "complete"}

    session = CouncilSession(SlowClient())

    async def run():
        await session.select_conversation("c1")
        task = session.send_message(PlainText("question"))
        await asyncio.sleep(0)
        await session.close()
        return task

    task = asyncio.run(run())

    assert task.cancelled()
    assert len(session.current_conversation.turns) == 2
    assert not session.is_loading


def test_stream_closed_as_soon_as_complete_arrives(events, error_handler):
    client = FakeClient([{"type": "complete"}, {"type": "stage1_start"}])
    session = CouncilSession(client)

    async def run():
        await session.select_conversation("c1")
        await session.send_message(PlainText("question"))
        assert client.stream_closed

    asyncio.run(run())

    assert not session.current_conversation.turns[-1].loading.any()
