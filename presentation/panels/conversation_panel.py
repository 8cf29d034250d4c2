# Conversation Panel - Main Panel Class
"""
对话面板主类

职责：
- 协调各子组件（MessageArea、InputArea、AttachmentManager）
- 通过 ViewModel 获取渲染计划，保持 UI 与对话存储解耦
- 处理用户交互：选择图片、提交消息
- 响应语言变更事件

数据流：
- 外部在每次对话更新时调用 set_conversation(conversation, is_loading)
- 用户提交时发出 message_submitted(content)，不等待发送结果

使用示例：
    from presentation.panels.conversation_panel import ConversationPanel

    panel = ConversationPanel()
    panel.message_submitted.connect(session.send_message)
    panel.set_conversation(conversation, is_loading=False)
"""

import logging
from typing import Any, Dict, List, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QMessageBox,
    QFileDialog,
)
from qasync import asyncSlot

from domain.conversation import Conversation, MessageContent
from infrastructure.config.settings import IMAGE_FILE_FILTER
from presentation.panels.conversation import (
    ConversationViewModel,
    DisplayState,
    InputArea,
    MessageArea,
)
from presentation.panels.conversation.attachment_manager import (
    AttachmentManager,
    FileReader,
)
from resources.theme import COLOR_BG_PRIMARY
from shared.safe_async_slot import safe_async_slot


# ============================================================
# ConversationPanel 类
# ============================================================

class ConversationPanel(QWidget):
    """
    对话面板主类

    协调各子组件，管理面板整体布局，通过 ViewModel 获取数据。
    """

    # 信号定义
    message_submitted = pyqtSignal(object)         # 用户提交的消息内容 (MessageContent)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        reader: Optional[FileReader] = None,
    ):
        super().__init__(parent)

        # 延迟获取的服务
        self._event_bus = None
        self._i18n = None
        self._logger = None
        self._subscribed = False

        self._view_model = ConversationViewModel(self)

        # 子组件引用
        self._message_area: Optional[MessageArea] = None
        self._input_area: Optional[InputArea] = None
        self._reader = reader

        self._setup_ui()
        self._connect_signals()
        self.refresh_display()

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def logger(self):
        """延迟获取日志器"""
        if self._logger is None:
            self._logger = logging.getLogger("conversation_panel")
        return self._logger

    @property
    def event_bus(self):
        """延迟获取事件总线"""
        if self._event_bus is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_EVENT_BUS
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus

    @property
    def i18n(self):
        """延迟获取国际化管理器"""
        if self._i18n is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_I18N_MANAGER
            self._i18n = ServiceLocator.get_optional(SVC_I18N_MANAGER)
        return self._i18n

    def _get_text(self, key: str, default: str = "") -> str:
        """获取国际化文本"""
        if self.i18n:
            return self.i18n.get_text(key, default)
        return default

    # ============================================================
    # UI 初始化
    # ============================================================

    def _setup_ui(self) -> None:
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        self.setObjectName("conversationPanel")
        self.setStyleSheet(
            f"QWidget#conversationPanel {{ background-color: {COLOR_BG_PRIMARY}; }}"
        )

        # 1. 消息显示区域
        self._message_area = MessageArea(self)
        main_layout.addWidget(self._message_area, 1)

        # 2. 输入区域（含附件预览）
        self._input_area = InputArea(self, reader=self._reader)
        main_layout.addWidget(self._input_area)

    def _connect_signals(self) -> None:
        self._view_model.render_changed.connect(self.refresh_display)
        self._view_model.loading_changed.connect(self._on_loading_changed)
        self._view_model.message_submitted.connect(self.message_submitted.emit)

        self._input_area.send_clicked.connect(self.submit_draft)
        self._input_area.attach_clicked.connect(self._on_attach_clicked)
        self._input_area.text_changed.connect(self._update_send_enabled)

        self.attachment_manager.attachments_changed.connect(self._update_send_enabled)
        self.attachment_manager.attachment_error.connect(self._on_attachment_error)

    # ============================================================
    # 初始化和清理
    # ============================================================

    def initialize(self) -> None:
        """订阅事件"""
        if self.event_bus is None or self._subscribed:
            return
        from shared.event_types import EVENT_LANGUAGE_CHANGED
        self.event_bus.subscribe(EVENT_LANGUAGE_CHANGED, self._on_language_changed)
        self._subscribed = True

    def cleanup(self) -> None:
        """取消事件订阅"""
        if self.event_bus is None or not self._subscribed:
            return
        from shared.event_types import EVENT_LANGUAGE_CHANGED
        self.event_bus.unsubscribe(EVENT_LANGUAGE_CHANGED, self._on_language_changed)
        self._subscribed = False

    # ============================================================
    # 属性
    # ============================================================

    @property
    def view_model(self) -> ConversationViewModel:
        return self._view_model

    @property
    def input_area(self) -> InputArea:
        return self._input_area

    @property
    def message_area(self) -> MessageArea:
        return self._message_area

    @property
    def attachment_manager(self) -> AttachmentManager:
        return self._input_area.attachment_manager

    @property
    def is_composer_visible(self) -> bool:
        return not self._input_area.isHidden()

    # ============================================================
    # 对话显示
    # ============================================================

    def set_conversation(
        self,
        conversation: Optional[Conversation],
        is_loading: bool = False,
    ) -> None:
        """设置当前对话，每次对话更新时调用"""
        self._view_model.set_conversation(conversation, is_loading)

    def refresh_display(self) -> None:
        """根据 ViewModel 刷新显示"""
        vm = self._view_model

        if vm.display_state == DisplayState.MESSAGES:
            self._message_area.render_turns(vm.display_turns)
        else:
            title, subtitle = vm.placeholder_texts()
            self._message_area.show_placeholder(title, subtitle)

        self._message_area.set_consulting(
            vm.show_consulting_indicator, vm.consulting_text()
        )

        self._input_area.setVisible(vm.show_composer)
        self._update_send_enabled()

    def _on_loading_changed(self, is_loading: bool) -> None:
        self._input_area.set_busy(is_loading)
        self._update_send_enabled()

    def _update_send_enabled(self, *_args) -> None:
        self._input_area.set_send_enabled(
            self._view_model.can_submit(
                self._input_area.get_text(), self.attachment_manager.count()
            )
        )

    # ============================================================
    # 提交
    # ============================================================

    def submit_draft(self) -> Optional[MessageContent]:
        """
        提交当前草稿

        成功时清空输入框和附件列表；前置条件不满足时不做任何事。
        """
        content = self._view_model.submit(
            self._input_area.get_text(),
            self.attachment_manager.images,
        )
        if content is None:
            return None

        self._input_area.clear_text()
        self.attachment_manager.clear()
        return content

    # ============================================================
    # 附件
    # ============================================================

    def _on_attach_clicked(self) -> None:
        """选择图片（可多选）"""
        paths, _ = QFileDialog.getOpenFileNames(
            self,
            self._get_text("dialog.select_images.title", "Select images"),
            "",
            IMAGE_FILE_FILTER,
        )
        if paths:
            self._stage_files(paths)

    @asyncSlot(list)
    @safe_async_slot()
    async def _stage_files(self, paths: List[str]) -> None:
        await self.attachment_manager.select_files(paths)

    def _on_attachment_error(self, message: str) -> None:
        QMessageBox.warning(
            self,
            self._get_text("dialog.warning.title", "Warning"),
            message,
        )

    # ============================================================
    # 事件处理 - EventBus 事件
    # ============================================================

    def _on_language_changed(self, event_data: Dict[str, Any]) -> None:
        self.retranslate_ui()

    # ============================================================
    # 国际化
    # ============================================================

    def retranslate_ui(self) -> None:
        """刷新 UI 文本"""
        self._input_area.retranslate_ui()
        self.refresh_display()


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "ConversationPanel",
]
