# Council Session - Application Service
"""
议会会话服务

职责：
- 持有后端客户端与对话存储
- 对话列表加载、新建对话、切换对话
- 发送消息：乐观追加轮次，异步消费后端流式事件，逐步填充三个阶段
- 通过 EventBus 通知界面刷新

初始化顺序：
- Phase 3.2，依赖 CouncilClient、EventBus、ErrorHandler（延迟获取）

设计原则：
- 所有状态修改都在主线程的事件循环中进行（qasync）
- send_message() 立即返回，发送在后台任务中完成
- 请求失败时回滚乐观追加的轮次；后端 error 事件只结束发送，不回滚

事件发布：
- EVENT_CONVERSATION_UPDATED       当前对话内容变化
- EVENT_CONVERSATION_LIST_UPDATED  对话列表变化
- EVENT_COUNCIL_LOADING_CHANGED    发送状态变化

使用示例：
    session = CouncilSession(client)
    await session.refresh_conversations()
    await session.create_conversation()
    session.send_message(PlainText("What is the best sorting algorithm?"))
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from domain.conversation import (
    Conversation,
    ConversationStore,
    ConversationSummary,
    MessageContent,
    Multimodal,
    PlainText,
    content_to_wire,
)
from domain.conversation.conversation_store import (
    STREAM_COMPLETE,
    STREAM_ERROR,
    STREAM_TITLE_COMPLETE,
)
from infrastructure.utils.logger import truncate_content
from shared.event_types import (
    EVENT_CONVERSATION_LIST_UPDATED,
    EVENT_CONVERSATION_UPDATED,
    EVENT_COUNCIL_LOADING_CHANGED,
)
from shared.service_locator import ServiceLocator
from shared.service_names import (
    SVC_COUNCIL_CLIENT,
    SVC_ERROR_HANDLER,
    SVC_EVENT_BUS,
)


class CouncilStreamError(Exception):
    """后端在流中报告的错误"""
    pass


def _preview_text(content: MessageContent) -> str:
    """日志用的文本预览，图片只记录数量"""
    if isinstance(content, PlainText):
        return content.text
    if isinstance(content, Multimodal):
        text = " ".join(p.text for p in content.text_parts)
        return f"{text} [+{len(content.image_parts)} images]"
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


class CouncilSession:
    """
    议会会话服务

    is_loading 为 True 期间不接受新的发送。
    """

    def __init__(self, client=None, store: Optional[ConversationStore] = None):
        self._client = client
        self._store = store or ConversationStore()
        self._is_loading = False
        self._send_task: Optional[asyncio.Task] = None

        self._event_bus = None
        self._error_handler = None
        self._logger = logging.getLogger("council_session")

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def client(self):
        if self._client is None:
            self._client = ServiceLocator.get(SVC_COUNCIL_CLIENT)
        return self._client

    @property
    def event_bus(self):
        if self._event_bus is None:
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus

    @property
    def error_handler(self):
        if self._error_handler is None:
            self._error_handler = ServiceLocator.get_optional(SVC_ERROR_HANDLER)
        return self._error_handler

    # ============================================================
    # 状态访问
    # ============================================================

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def current_conversation(self) -> Optional[Conversation]:
        return self._store.current

    @property
    def conversations(self) -> List[ConversationSummary]:
        return self._store.summaries

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def send_task(self) -> Optional[asyncio.Task]:
        """最近一次发送的后台任务（测试用）"""
        return self._send_task

    # ============================================================
    # 对话列表与切换
    # ============================================================

    async def refresh_conversations(self) -> List[ConversationSummary]:
        """从后端重新加载对话列表"""
        payload = await self.client.list_conversations()
        summaries = [
            ConversationSummary.from_dict(item)
            for item in payload
            if isinstance(item, dict) and item.get("id")
        ]
        self._store.set_summaries(summaries)
        self._publish(EVENT_CONVERSATION_LIST_UPDATED, {"count": len(summaries)})
        return summaries

    async def create_conversation(self) -> Conversation:
        """新建对话并设为当前对话"""
        payload = await self.client.create_conversation()
        conversation = Conversation.from_dict(payload)
        self._logger.info(f"Created conversation {conversation.id}")

        summaries = self._store.summaries
        summaries.insert(0, ConversationSummary(
            id=conversation.id,
            title=conversation.title,
            created_at=conversation.created_at,
            message_count=0,
        ))
        self._store.set_summaries(summaries)
        self._store.set_current(conversation)

        self._publish(EVENT_CONVERSATION_LIST_UPDATED, {"count": len(summaries)})
        self._publish_conversation_updated()
        return conversation

    async def select_conversation(self, conversation_id: str) -> Conversation:
        """加载完整对话并设为当前对话"""
        payload = await self.client.get_conversation(conversation_id)
        conversation = Conversation.from_dict(payload)
        self._store.set_current(conversation)
        self._publish_conversation_updated()
        return conversation

    # ============================================================
    # 发送消息
    # ============================================================

    def send_message(self, content: MessageContent) -> Optional[asyncio.Task]:
        """
        发送消息（立即返回）

        乐观追加用户轮次和空的助手轮次，然后在后台任务中消费流式事件。

        Returns:
            后台任务；未选择对话或已有发送进行中时返回 None
        """
        conversation = self._store.current
        if conversation is None:
            self._logger.warning("send_message called without a selected conversation")
            return None
        if self._is_loading:
            self._logger.warning("send_message called while a send is outstanding")
            return None

        self._logger.info(
            f"Sending message to {conversation.id}: {truncate_content(_preview_text(content), 80)}"
        )
        self._store.append_user_turn(content)
        self._store.begin_assistant_turn()
        self._set_loading(True)
        self._publish_conversation_updated()

        self._send_task = asyncio.ensure_future(self._run_send(conversation.id, content))
        return self._send_task

    async def _run_send(self, conversation_id: str, content: MessageContent) -> None:
        stream = self.client.send_message_stream(conversation_id, content_to_wire(content))
        try:
            async for event in stream:
                self._handle_stream_event(conversation_id, event)
                if event.get("type") in (STREAM_COMPLETE, STREAM_ERROR):
                    break

        except asyncio.CancelledError:
            self._rollback(conversation_id)
            raise

        except Exception as e:
            self._rollback(conversation_id)
            self._report_error(e, conversation_id)

        finally:
            try:
                # 提前退出时立即关闭 HTTP 响应
                await stream.aclose()
            finally:
                self._set_loading(False)

    def _handle_stream_event(self, conversation_id: str, event: Dict[str, Any]) -> None:
        current = self._store.current
        if current is None or current.id != conversation_id:
            # 用户已切换到其他对话，后端仍会保存本次结果
            self._logger.debug(f"Dropping stream event for inactive conversation: {event.get('type')}")
            return

        event_type = event.get("type")
        changed = self._store.apply_stream_event(event)
        if changed:
            self._publish_conversation_updated()

        if event_type == STREAM_TITLE_COMPLETE and changed:
            self._publish(EVENT_CONVERSATION_LIST_UPDATED, {"count": len(self._store.summaries)})
        elif event_type == STREAM_COMPLETE:
            self._bump_message_count(conversation_id)
        elif event_type == STREAM_ERROR:
            message = event.get("message") or "Unknown council error"
            self._report_error(CouncilStreamError(message), conversation_id)

    # ============================================================
    # 生命周期
    # ============================================================

    async def close(self) -> None:
        if self._send_task is not None and not self._send_task.done():
            self._send_task.cancel()
            try:
                await self._send_task
            except asyncio.CancelledError:
                self._logger.info("Outstanding send cancelled on close")
        if self._client is not None:
            await self._client.close()

    # ============================================================
    # 内部方法
    # ============================================================

    def _rollback(self, conversation_id: str) -> None:
        current = self._store.current
        if current is None or current.id != conversation_id:
            return
        if self._store.rollback_pending_turns():
            self._publish_conversation_updated()

    def _bump_message_count(self, conversation_id: str) -> None:
        summaries = self._store.summaries
        for summary in summaries:
            if summary.id == conversation_id:
                summary.message_count += 2
        self._store.set_summaries(summaries)
        self._publish(EVENT_CONVERSATION_LIST_UPDATED, {"count": len(summaries)})

    def _report_error(self, error: Exception, conversation_id: str) -> None:
        context = {"operation": "send_message", "conversation_id": conversation_id}
        if self.error_handler is not None:
            self.error_handler.handle_error(error, context=context)
        else:
            self._logger.error(f"Send failed for {conversation_id}: {error}")

    def _set_loading(self, loading: bool) -> None:
        if self._is_loading == loading:
            return
        self._is_loading = loading
        self._publish(EVENT_COUNCIL_LOADING_CHANGED, {"is_loading": loading})

    def _publish_conversation_updated(self) -> None:
        current = self._store.current
        self._publish(
            EVENT_CONVERSATION_UPDATED,
            {"conversation_id": current.id if current else None},
        )

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, data, source="council_session")


__all__ = [
    "CouncilSession",
    "CouncilStreamError",
]
