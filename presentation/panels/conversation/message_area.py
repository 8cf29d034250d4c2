# Message Area Component
"""
消息显示区域

职责：
- 管理消息滚动区域
- 显示占位提示（未选择对话 / 空对话）
- 使用 MessageBubble 逐个渲染轮次
- 显示对话级别的“正在咨询”提示
- 内容更新后自动滚动到底部
"""

import logging
from typing import List, Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QLabel,
    QScrollArea,
    QFrame,
    QSizePolicy,
)

from presentation.panels.conversation.conversation_view_model import DisplayTurn
from presentation.panels.conversation.message_bubble import (
    MessageBubble,
    create_progress_row,
)
from resources.theme import (
    COLOR_TEXT_PRIMARY,
    COLOR_TEXT_SECONDARY,
    FONT_SIZE_LARGE_TITLE,
)


# 常量
MESSAGE_SPACING = 12


class MessageArea(QWidget):
    """
    消息显示区域组件

    每次渲染都会重建全部轮次控件，轮次数量不大，保持实现简单。
    """

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self._logger = logging.getLogger("message_area")
        self._bubble = MessageBubble(self)
        self._scroll_area: Optional[QScrollArea] = None
        self._content: Optional[QWidget] = None
        self._content_layout: Optional[QVBoxLayout] = None
        self._turn_widgets: List[QWidget] = []
        self._placeholder: Optional[QWidget] = None
        self._consulting_row: Optional[QWidget] = None

        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self._scroll_area = QScrollArea()
        self._scroll_area.setWidgetResizable(True)
        self._scroll_area.setFrameShape(QFrame.Shape.NoFrame)
        self._scroll_area.setHorizontalScrollBarPolicy(
            Qt.ScrollBarPolicy.ScrollBarAlwaysOff
        )

        self._content = QWidget()
        self._content.setObjectName("messageAreaContent")
        self._content_layout = QVBoxLayout(self._content)
        self._content_layout.setContentsMargins(16, 16, 16, 16)
        self._content_layout.setSpacing(MESSAGE_SPACING)
        self._content_layout.addStretch()

        self._scroll_area.setWidget(self._content)
        layout.addWidget(self._scroll_area)

    # ============================================================
    # 公共方法 - 渲染
    # ============================================================

    def show_placeholder(self, title: str, subtitle: str) -> None:
        """清空消息并显示占位提示"""
        self.clear_messages()

        placeholder = QWidget()
        placeholder.setObjectName("emptyState")
        placeholder.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        p_layout = QVBoxLayout(placeholder)
        p_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title_label = QLabel(title)
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title_label.setStyleSheet(
            f"color: {COLOR_TEXT_PRIMARY}; font-size: {FONT_SIZE_LARGE_TITLE}px; font-weight: bold;"
        )
        p_layout.addWidget(title_label)

        subtitle_label = QLabel(subtitle)
        subtitle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        subtitle_label.setStyleSheet(f"color: {COLOR_TEXT_SECONDARY};")
        p_layout.addWidget(subtitle_label)

        self._content_layout.insertWidget(0, placeholder, 1)
        self._placeholder = placeholder

    def render_turns(self, turns: List[DisplayTurn]) -> None:
        """渲染轮次列表"""
        self.clear_messages()

        for turn in turns:
            widget = self._bubble.render(turn)
            self._content_layout.insertWidget(self._content_layout.count() - 1, widget)
            self._turn_widgets.append(widget)

        self.scroll_to_bottom()

    def set_consulting(self, visible: bool, text: str = "") -> None:
        """显示或隐藏“正在咨询”提示（位于最后一个轮次之后）"""
        if self._consulting_row is not None:
            self._content_layout.removeWidget(self._consulting_row)
            self._consulting_row.deleteLater()
            self._consulting_row = None

        if visible:
            self._consulting_row = create_progress_row(text)
            self._consulting_row.setObjectName("consultingIndicator")
            self._content_layout.insertWidget(
                self._content_layout.count() - 1, self._consulting_row
            )
            self.scroll_to_bottom()

    def clear_messages(self) -> None:
        """清空消息显示"""
        for widget in self._turn_widgets:
            self._content_layout.removeWidget(widget)
            widget.deleteLater()
        self._turn_widgets.clear()

        if self._placeholder is not None:
            self._content_layout.removeWidget(self._placeholder)
            self._placeholder.deleteLater()
            self._placeholder = None

        self.set_consulting(False)

    # ============================================================
    # 只读状态
    # ============================================================

    @property
    def turn_widgets(self) -> List[QWidget]:
        return list(self._turn_widgets)

    @property
    def is_showing_placeholder(self) -> bool:
        return self._placeholder is not None

    @property
    def is_consulting_visible(self) -> bool:
        return self._consulting_row is not None

    # ============================================================
    # 公共方法 - 滚动控制
    # ============================================================

    def scroll_to_bottom(self) -> None:
        """布局完成后滚动到底部"""
        QTimer.singleShot(0, self._do_scroll_to_bottom)

    def _do_scroll_to_bottom(self) -> None:
        if self._scroll_area is None:
            return
        bar = self._scroll_area.verticalScrollBar()
        bar.setValue(bar.maximum())


__all__ = [
    "MessageArea",
    "MESSAGE_SPACING",
]
