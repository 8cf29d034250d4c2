# Main Window - Application Main Window
"""
主窗口类 - 应用程序主窗口框架

职责：
- 窗口布局：左侧对话列表，右侧对话面板
- 事件订阅与分发：把 CouncilSession 的状态变化同步到界面
- 用户操作转发：新建对话、切换对话、发送消息
- 错误提示：作为 ErrorHandler 的 UI 通知回调

初始化顺序：
- Phase 2.2 创建，依赖 ServiceLocator（获取 I18nManager、EventBus、ErrorHandler）
- Phase 3.2 由 bootstrap 调用 attach_session() 绑定会话

设计原则：
- 主窗口类仅负责布局协调和转发，业务状态由 CouncilSession 持有
- 延迟获取 ServiceLocator 中的服务
- 所有用户可见文本通过 i18n_manager.get_text() 获取
"""

from typing import Any, Dict, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)
from qasync import asyncSlot

from infrastructure.config.settings import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    SIDEBAR_WIDTH,
)
from presentation.panels.conversation_panel import ConversationPanel
from resources.theme import COLOR_TEXT_PRIMARY, FONT_SIZE_LARGE_TITLE
from shared.error_types import ErrorCategory
from shared.event_types import (
    EVENT_CONVERSATION_LIST_UPDATED,
    EVENT_CONVERSATION_UPDATED,
    EVENT_COUNCIL_LOADING_CHANGED,
    EVENT_LANGUAGE_CHANGED,
)
from shared.safe_async_slot import safe_async_slot


# 列表项中保存对话 ID 的数据角色
CONVERSATION_ID_ROLE = Qt.ItemDataRole.UserRole


class MainWindow(QMainWindow):
    """
    应用程序主窗口

    布局结构：
    - 左栏：标题、“新建对话”按钮、对话列表
    - 右栏：ConversationPanel
    """

    def __init__(self):
        super().__init__()

        # 延迟获取的服务
        self._i18n_manager = None
        self._event_bus = None
        self._error_handler = None
        self._logger = None

        self._session = None
        self._subscribed = False

        # UI 组件引用
        self._title_label: Optional[QLabel] = None
        self._new_button: Optional[QPushButton] = None
        self._conversation_list: Optional[QListWidget] = None
        self._conversation_panel: Optional[ConversationPanel] = None

        self._setup_window()
        self._setup_central_widget()
        self._connect_signals()

        self.retranslate_ui()
        self._install_error_notifier()
        self._conversation_panel.initialize()

        if self.event_bus is not None:
            self.event_bus.subscribe(EVENT_LANGUAGE_CHANGED, self._on_language_changed)

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def i18n_manager(self):
        """延迟获取 I18nManager"""
        if self._i18n_manager is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_I18N_MANAGER
            self._i18n_manager = ServiceLocator.get_optional(SVC_I18N_MANAGER)
        return self._i18n_manager

    @property
    def event_bus(self):
        """延迟获取 EventBus"""
        if self._event_bus is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_EVENT_BUS
            self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        return self._event_bus

    @property
    def error_handler(self):
        """延迟获取 ErrorHandler"""
        if self._error_handler is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_ERROR_HANDLER
            self._error_handler = ServiceLocator.get_optional(SVC_ERROR_HANDLER)
        return self._error_handler

    @property
    def logger(self):
        """延迟获取 Logger"""
        if self._logger is None:
            from infrastructure.utils.logger import get_logger
            self._logger = get_logger("main_window")
        return self._logger

    @property
    def session(self):
        return self._session

    @property
    def conversation_panel(self) -> ConversationPanel:
        return self._conversation_panel

    @property
    def conversation_list(self) -> QListWidget:
        return self._conversation_list

    def _get_text(self, key: str, default: Optional[str] = None, **kwargs) -> str:
        """获取国际化文本"""
        if self.i18n_manager:
            return self.i18n_manager.get_text(key, default, **kwargs)
        if default is None:
            return key
        return default.format(**kwargs) if kwargs else default

    # ============================================================
    # 窗口初始化
    # ============================================================

    def _setup_window(self):
        self.setMinimumSize(800, 600)
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

    def _setup_central_widget(self):
        central = QWidget()
        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # 左栏
        sidebar = QWidget()
        sidebar.setObjectName("conversationSidebar")
        sidebar.setFixedWidth(SIDEBAR_WIDTH)
        sidebar_layout = QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(12, 12, 12, 12)
        sidebar_layout.setSpacing(8)

        self._title_label = QLabel()
        self._title_label.setStyleSheet(
            f"color: {COLOR_TEXT_PRIMARY}; font-size: {FONT_SIZE_LARGE_TITLE}px; font-weight: bold;"
        )
        sidebar_layout.addWidget(self._title_label)

        self._new_button = QPushButton()
        self._new_button.setObjectName("newConversationButton")
        sidebar_layout.addWidget(self._new_button)

        self._conversation_list = QListWidget()
        self._conversation_list.setObjectName("conversationList")
        sidebar_layout.addWidget(self._conversation_list, 1)

        layout.addWidget(sidebar)

        # 右栏
        self._conversation_panel = ConversationPanel(self)
        layout.addWidget(self._conversation_panel, 1)

        self.setCentralWidget(central)

    def _connect_signals(self):
        self._new_button.clicked.connect(self._on_new_conversation_clicked)
        self._conversation_list.itemClicked.connect(self._on_conversation_item_clicked)
        self._conversation_panel.message_submitted.connect(self._on_message_submitted)

    def _install_error_notifier(self):
        if self.error_handler is not None:
            self.error_handler.set_notify_callback(self._show_error_notification)

    # ============================================================
    # 会话绑定
    # ============================================================

    def attach_session(self, session) -> None:
        """
        绑定 CouncilSession（Phase 3.2 调用）

        订阅会话相关事件并按当前状态刷新界面。
        """
        self._session = session

        if self.event_bus is not None and not self._subscribed:
            self.event_bus.subscribe(EVENT_CONVERSATION_UPDATED, self._on_conversation_updated)
            self.event_bus.subscribe(EVENT_CONVERSATION_LIST_UPDATED, self._on_conversation_list_updated)
            self.event_bus.subscribe(EVENT_COUNCIL_LOADING_CHANGED, self._on_loading_changed)
            self._subscribed = True

        self.refresh_conversation_list()
        self.refresh_conversation()
        self.logger.info("CouncilSession attached to main window")

    def _unsubscribe_events(self) -> None:
        if self.event_bus is None:
            return
        self.event_bus.unsubscribe(EVENT_LANGUAGE_CHANGED, self._on_language_changed)
        if self._subscribed:
            self.event_bus.unsubscribe(EVENT_CONVERSATION_UPDATED, self._on_conversation_updated)
            self.event_bus.unsubscribe(EVENT_CONVERSATION_LIST_UPDATED, self._on_conversation_list_updated)
            self.event_bus.unsubscribe(EVENT_COUNCIL_LOADING_CHANGED, self._on_loading_changed)
            self._subscribed = False

    # ============================================================
    # 界面刷新
    # ============================================================

    def refresh_conversation(self) -> None:
        """把会话的当前对话推送到对话面板"""
        if self._session is None:
            self._conversation_panel.set_conversation(None, False)
            return
        self._conversation_panel.set_conversation(
            self._session.current_conversation,
            self._session.is_loading,
        )
        self._sync_list_selection()

    def refresh_conversation_list(self) -> None:
        """重建左侧对话列表"""
        self._conversation_list.blockSignals(True)
        try:
            self._conversation_list.clear()
            if self._session is None:
                return
            for summary in self._session.conversations:
                item = QListWidgetItem(self._format_summary(summary))
                item.setData(CONVERSATION_ID_ROLE, summary.id)
                item.setToolTip(summary.title)
                self._conversation_list.addItem(item)
        finally:
            self._conversation_list.blockSignals(False)
        self._sync_list_selection()

    def _format_summary(self, summary) -> str:
        count = self._get_text(
            "sidebar.message_count", "{count} messages", count=summary.message_count
        )
        return f"{summary.title}\n{count}"

    def _sync_list_selection(self) -> None:
        current = self._session.current_conversation if self._session else None
        current_id = current.id if current else None

        self._conversation_list.blockSignals(True)
        try:
            self._conversation_list.clearSelection()
            for row in range(self._conversation_list.count()):
                item = self._conversation_list.item(row)
                if item.data(CONVERSATION_ID_ROLE) == current_id:
                    self._conversation_list.setCurrentItem(item)
                    break
        finally:
            self._conversation_list.blockSignals(False)

    # ============================================================
    # EventBus 事件处理
    # ============================================================

    def _on_conversation_updated(self, event_data: Dict[str, Any]) -> None:
        self.refresh_conversation()

    def _on_conversation_list_updated(self, event_data: Dict[str, Any]) -> None:
        self.refresh_conversation_list()

    def _on_loading_changed(self, event_data: Dict[str, Any]) -> None:
        self.refresh_conversation()
        self._new_button.setEnabled(not event_data.get("data", {}).get("is_loading", False))

    def _on_language_changed(self, event_data: Dict[str, Any]) -> None:
        self.retranslate_ui()
        self.refresh_conversation_list()

    # ============================================================
    # 用户操作
    # ============================================================

    def _on_message_submitted(self, content) -> None:
        if self._session is None:
            self.logger.warning("Message submitted before the council session is ready")
            return
        self._session.send_message(content)

    def _on_conversation_item_clicked(self, item: QListWidgetItem) -> None:
        conversation_id = item.data(CONVERSATION_ID_ROLE)
        current = self._session.current_conversation if self._session else None
        if conversation_id and (current is None or current.id != conversation_id):
            self._select_conversation(conversation_id)

    @asyncSlot(str)
    @safe_async_slot()
    async def _select_conversation(self, conversation_id: str) -> None:
        if self._session is None:
            return
        await self._session.select_conversation(conversation_id)

    @asyncSlot()
    @safe_async_slot()
    async def _on_new_conversation_clicked(self) -> None:
        if self._session is None:
            self.logger.warning("New conversation requested before the council session is ready")
            return
        await self._session.create_conversation()

    # ============================================================
    # 错误提示
    # ============================================================

    def _show_error_notification(
        self,
        error_category: ErrorCategory,
        error_type,
        message: str,
        hint: str,
        error: Exception,
    ) -> None:
        """ErrorHandler 的 UI 通知回调"""
        title = self._get_text("dialog.error.title", "Error")
        text = f"{message}\n\n{hint}" if hint else message
        detail = str(error)
        if detail:
            text = f"{text}\n\n{detail}"

        if error_category == ErrorCategory.FATAL:
            QMessageBox.critical(self, title, text)
        else:
            QMessageBox.warning(self, title, text)

    # ============================================================
    # 国际化
    # ============================================================

    def retranslate_ui(self):
        self.setWindowTitle(self._get_text("app.title", "LLM Council"))
        self._title_label.setText(self._get_text("app.title", "LLM Council"))
        self._new_button.setText(self._get_text("btn.new_conversation", "+ New Conversation"))
        self._conversation_panel.retranslate_ui()

    # ============================================================
    # 窗口事件
    # ============================================================

    def closeEvent(self, event):
        self._unsubscribe_events()
        self._conversation_panel.cleanup()
        if self.error_handler is not None:
            self.error_handler.set_notify_callback(None)
        super().closeEvent(event)


__all__ = ["MainWindow"]
