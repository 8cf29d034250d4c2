# Input Area Component
"""
输入区域组件

职责：
- 专注于用户输入：文本框、附件按钮、发送按钮
- 内嵌 AttachmentManager 显示已暂存图片
- 处理键盘约定：Enter 发送，Shift+Enter 换行

使用示例：
    from presentation.panels.conversation.input_area import InputArea

    input_area = InputArea()
    input_area.send_clicked.connect(on_send)
    text = input_area.get_text()
"""

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal, QEvent
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QTextEdit,
    QToolButton,
)

from presentation.panels.conversation.attachment_manager import (
    AttachmentManager,
    FileReader,
)
from resources.theme import (
    BORDER_RADIUS_LARGE,
    COLOR_ACCENT,
    COLOR_ACCENT_HOVER,
    COLOR_ACCENT_PRESSED,
    COLOR_BG_SECONDARY,
    COLOR_BORDER,
    COLOR_DISABLED,
)


# ============================================================
# 键盘约定
# ============================================================

SUBMIT_KEYS = (Qt.Key.Key_Return, Qt.Key.Key_Enter)


def is_submit_key(key: int, modifiers: Qt.KeyboardModifier) -> bool:
    """
    判断按键是否应触发发送

    Enter / Return 且未按住 Shift 时发送；按住 Shift 时插入换行。
    """
    if key not in SUBMIT_KEYS:
        return False
    return not bool(modifiers & Qt.KeyboardModifier.ShiftModifier)


# ============================================================
# InputArea 类
# ============================================================

class InputArea(QWidget):
    """
    输入区域组件

    只负责收集输入和发出信号，提交规则由 ConversationViewModel 判断。
    """

    # 信号定义
    send_clicked = pyqtSignal()                    # 发送（按钮或 Enter）
    attach_clicked = pyqtSignal()                  # 附件按钮点击
    text_changed = pyqtSignal(str)                 # 文本变化

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        reader: Optional[FileReader] = None,
    ):
        super().__init__(parent)

        # 内部状态
        self._send_enabled = False
        self._busy = False

        # UI 组件引用
        self._input_text: Optional[QTextEdit] = None
        self._send_button: Optional[QPushButton] = None
        self._attach_button: Optional[QToolButton] = None
        self._attachment_manager = AttachmentManager(reader=reader)

        # 延迟获取的服务
        self._i18n = None

        self._setup_ui()

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

    def _setup_ui(self) -> None:
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(12, 0, 12, 12)
        main_layout.setSpacing(8)

        # 附件预览区（位于输入框上方，无附件时隐藏）
        main_layout.addWidget(self._attachment_manager)

        input_row = QHBoxLayout()
        input_row.setSpacing(8)

        self._input_text = QTextEdit()
        self._input_text.setAcceptRichText(False)
        self._input_text.setPlaceholderText(self._get_placeholder())
        self._input_text.setMinimumHeight(60)
        self._input_text.setMaximumHeight(120)
        self._input_text.setStyleSheet(f"""
            QTextEdit {{
                background-color: {COLOR_BG_SECONDARY};
                border: 1px solid {COLOR_BORDER};
                border-radius: {BORDER_RADIUS_LARGE}px;
                padding: 8px;
                font-size: 14px;
            }}
            QTextEdit:focus {{
                border-color: {COLOR_ACCENT};
            }}
        """)
        self._input_text.textChanged.connect(self._on_text_changed)
        self._input_text.installEventFilter(self)
        input_row.addWidget(self._input_text, 1)

        buttons = QVBoxLayout()
        buttons.setSpacing(6)

        self._attach_button = QToolButton()
        self._attach_button.setText("📎")
        self._attach_button.setFixedSize(36, 28)
        self._attach_button.setToolTip(self._get_text("btn.attach_images", "Attach images"))
        self._attach_button.setStyleSheet("""
            QToolButton {
                background-color: transparent;
                border: 1px solid #e0e0e0;
                border-radius: 4px;
            }
            QToolButton:hover {
                background-color: rgba(0, 0, 0, 0.08);
            }
        """)
        self._attach_button.clicked.connect(self.attach_clicked.emit)
        buttons.addWidget(self._attach_button)

        self._send_button = QPushButton(self._get_text("btn.send", "Send"))
        self._send_button.setFixedSize(64, 28)
        self._send_button.setStyleSheet(f"""
            QPushButton {{
                background-color: {COLOR_ACCENT};
                color: white;
                border: none;
                border-radius: 4px;
                font-weight: bold;
            }}
            QPushButton:hover {{
                background-color: {COLOR_ACCENT_HOVER};
            }}
            QPushButton:pressed {{
                background-color: {COLOR_ACCENT_PRESSED};
            }}
            QPushButton:disabled {{
                background-color: {COLOR_DISABLED};
            }}
        """)
        self._send_button.setEnabled(False)
        self._send_button.clicked.connect(self._on_send_clicked)
        buttons.addWidget(self._send_button)
        buttons.addStretch()

        input_row.addLayout(buttons)
        main_layout.addLayout(input_row)

    def _get_placeholder(self) -> str:
        return self._get_text(
            "hint.enter_message",
            "Ask your question... (Shift+Enter for new line, Enter to send)",
        )

    # ============================================================
    # 公共方法
    # ============================================================

    @property
    def attachment_manager(self) -> AttachmentManager:
        return self._attachment_manager

    def get_text(self) -> str:
        return self._input_text.toPlainText()

    def set_text(self, text: str) -> None:
        self._input_text.setPlainText(text)

    def clear_text(self) -> None:
        self._input_text.clear()

    def set_send_enabled(self, enabled: bool) -> None:
        """设置发送按钮状态"""
        self._send_enabled = enabled
        self._send_button.setEnabled(enabled)

    def is_send_enabled(self) -> bool:
        return self._send_enabled

    def set_busy(self, busy: bool) -> None:
        """加载期间禁止编辑和添加附件"""
        self._busy = busy
        self._input_text.setReadOnly(busy)
        self._attach_button.setEnabled(not busy)

    # ============================================================
    # 事件处理
    # ============================================================

    def _on_text_changed(self) -> None:
        self.text_changed.emit(self._input_text.toPlainText())

    def _on_send_clicked(self) -> None:
        if self._send_enabled:
            self.send_clicked.emit()

    def eventFilter(self, obj, event) -> bool:
        """事件过滤器，处理输入框的键盘事件"""
        if obj is self._input_text and event.type() == QEvent.Type.KeyPress:
            if is_submit_key(event.key(), event.modifiers()):
                # 拦截换行，由面板决定是否真正发送
                self.send_clicked.emit()
                return True
        return super().eventFilter(obj, event)

    # ============================================================
    # 国际化
    # ============================================================

    def retranslate_ui(self) -> None:
        self._send_button.setText(self._get_text("btn.send", "Send"))
        self._attach_button.setToolTip(self._get_text("btn.attach_images", "Attach images"))
        self._input_text.setPlaceholderText(self._get_placeholder())


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "InputArea",
    "is_submit_key",
    "SUBMIT_KEYS",
]
