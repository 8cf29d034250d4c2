# Message Bubble Component
"""
消息气泡组件

职责：
- 专注于单个轮次的渲染
- 用户轮次：纯文本渲染为一个 Markdown 块；多模态按片段顺序渲染（文本 -> Markdown，图片 -> 内联图片）
- 助手轮次：按 1、2、3 的固定顺序渲染各阶段，进行中显示进度提示，完成后显示阶段视图

使用示例：
    from presentation.panels.conversation.message_bubble import MessageBubble

    bubble = MessageBubble()
    widget = bubble.render(display_turn)
"""

import logging
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QFrame,
    QProgressBar,
    QSizePolicy,
)

from domain.conversation import ImagePart, Multimodal, PlainText, StageStatus, TextPart
from infrastructure.config.settings import INLINE_IMAGE_MAX_WIDTH
from infrastructure.utils.data_url import decode_data_url
from presentation.panels.conversation.conversation_view_model import (
    DisplayTurn,
    StageDisplay,
    STAGE_PROGRESS_LABELS,
)
from presentation.panels.conversation.stage_views import (
    create_markdown_label,
    create_stage_view,
)
from resources.theme import (
    COLOR_ACCENT,
    COLOR_ACCENT_LIGHT,
    COLOR_BG_SECONDARY,
    COLOR_TEXT_SECONDARY,
    COLOR_TEXT_TERTIARY,
    FONT_SIZE_SMALL,
)

# ============================================================
# 样式常量
# ============================================================

USER_MESSAGE_BG = COLOR_ACCENT_LIGHT
ASSISTANT_MESSAGE_BG = COLOR_BG_SECONDARY
MESSAGE_PADDING = 12
MESSAGE_BORDER_RADIUS = 12

# 进度提示对象名，供样式表和测试查找
STAGE_PROGRESS_OBJECT_NAME = "stageProgress"
INLINE_IMAGE_OBJECT_NAME = "inlineImage"


# ============================================================
# MessageBubble 类
# ============================================================

class MessageBubble(QWidget):
    """
    消息气泡组件

    专注于单个轮次的渲染，根据角色渲染不同样式。
    """

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._i18n = None
        self._logger = logging.getLogger("message_bubble")

    @property
    def i18n(self):
        """延迟获取国际化管理器"""
        if self._i18n is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_I18N_MANAGER
            self._i18n = ServiceLocator.get_optional(SVC_I18N_MANAGER)
        return self._i18n

    def _get_text(self, key: str, default: str = "") -> str:
        if self.i18n:
            return self.i18n.get_text(key, default)
        return default

    def render(self, turn: DisplayTurn) -> QWidget:
        """
        渲染轮次

        Args:
            turn: DisplayTurn 对象

        Returns:
            QWidget: 渲染后的组件
        """
        if turn.is_user():
            return self.render_user_message(turn)
        return self.render_assistant_message(turn)

    # ============================================================
    # 用户轮次
    # ============================================================

    def render_user_message(self, turn: DisplayTurn) -> QWidget:
        """渲染用户轮次（右对齐、浅蓝背景）"""
        container = QWidget()
        container.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        layout = QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # 左侧弹性空间（占 30%）
        layout.addStretch(3)

        bubble = QFrame()
        bubble.setObjectName("userBubble")
        bubble.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        bubble.setStyleSheet(f"""
            QFrame#userBubble {{
                background-color: {USER_MESSAGE_BG};
                border-radius: {MESSAGE_BORDER_RADIUS}px;
                padding: {MESSAGE_PADDING}px;
            }}
        """)

        bubble_layout = QVBoxLayout(bubble)
        bubble_layout.setContentsMargins(0, 0, 0, 0)
        bubble_layout.setSpacing(6)

        bubble_layout.addWidget(self._create_role_label(self._get_text("role.user", "You")))

        content = turn.content
        if isinstance(content, PlainText):
            bubble_layout.addWidget(create_markdown_label(content.text))
        elif isinstance(content, Multimodal):
            for part in content.parts:
                if isinstance(part, TextPart):
                    bubble_layout.addWidget(create_markdown_label(part.text))
                elif isinstance(part, ImagePart):
                    bubble_layout.addWidget(self._create_inline_image(part.url))
        else:
            self._logger.warning(f"User turn {turn.id} has no renderable content")

        # 右侧占 70%
        layout.addWidget(bubble, 7)
        return container

    def _create_inline_image(self, url: str) -> QLabel:
        label = QLabel()
        label.setObjectName(INLINE_IMAGE_OBJECT_NAME)
        label.setAlignment(Qt.AlignmentFlag.AlignLeft)

        pixmap = QPixmap()
        try:
            _, data = decode_data_url(url)
            loaded = pixmap.loadFromData(data)
        except ValueError as e:
            self._logger.warning(f"Cannot decode inline image: {e}")
            loaded = False

        if loaded:
            if pixmap.width() > INLINE_IMAGE_MAX_WIDTH:
                pixmap = pixmap.scaledToWidth(
                    INLINE_IMAGE_MAX_WIDTH,
                    Qt.TransformationMode.SmoothTransformation,
                )
            label.setPixmap(pixmap)
        else:
            label.setText(self._get_text("message.image_unavailable", "[image]"))
            label.setStyleSheet(f"color: {COLOR_TEXT_TERTIARY};")
        return label

    # ============================================================
    # 助手轮次
    # ============================================================

    def render_assistant_message(self, turn: DisplayTurn) -> QWidget:
        """渲染助手轮次（填满宽度、浅灰背景、分阶段）"""
        container = QWidget()
        container.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        layout = QVBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        bubble = QFrame()
        bubble.setObjectName("assistantBubble")
        bubble.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        bubble.setStyleSheet(f"""
            QFrame#assistantBubble {{
                background-color: {ASSISTANT_MESSAGE_BG};
                border-radius: {MESSAGE_BORDER_RADIUS}px;
                padding: {MESSAGE_PADDING}px;
            }}
        """)

        bubble_layout = QVBoxLayout(bubble)
        bubble_layout.setContentsMargins(0, 0, 0, 0)
        bubble_layout.setSpacing(8)

        bubble_layout.addWidget(
            self._create_role_label(self._get_text("role.assistant", "LLM Council"))
        )

        for stage in turn.stages:
            widget = self.render_stage(stage)
            if widget is not None:
                bubble_layout.addWidget(widget)

        layout.addWidget(bubble)
        return container

    def render_stage(self, stage: StageDisplay) -> Optional[QWidget]:
        """
        渲染单个阶段

        PENDING 返回 None；IN_FLIGHT 返回进度提示；COMPLETE 返回阶段视图。
        """
        if stage.status == StageStatus.IN_FLIGHT:
            key, default = STAGE_PROGRESS_LABELS[stage.stage]
            return create_progress_row(self._get_text(key, default))
        if stage.status == StageStatus.COMPLETE:
            return create_stage_view(
                stage.stage,
                stage.payload,
                stage.label_to_model,
                stage.aggregate_rankings,
            )
        return None

    def _create_role_label(self, text: str) -> QLabel:
        label = QLabel(text)
        label.setStyleSheet(f"""
            QLabel {{
                color: {COLOR_TEXT_SECONDARY};
                font-size: {FONT_SIZE_SMALL}px;
                font-weight: bold;
                background: transparent;
            }}
        """)
        return label


def create_progress_row(text: str) -> QWidget:
    """创建“进行中”提示行：不定进度条 + 文本"""
    row = QWidget()
    row.setObjectName(STAGE_PROGRESS_OBJECT_NAME)
    layout = QHBoxLayout(row)
    layout.setContentsMargins(0, 4, 0, 4)
    layout.setSpacing(8)

    spinner = QProgressBar()
    spinner.setRange(0, 0)
    spinner.setFixedSize(40, 6)
    spinner.setTextVisible(False)
    spinner.setStyleSheet(f"""
        QProgressBar {{
            background-color: #e0e0e0;
            border: none;
            border-radius: 3px;
        }}
        QProgressBar::chunk {{
            background-color: {COLOR_ACCENT};
            border-radius: 3px;
        }}
    """)
    layout.addWidget(spinner)

    label = QLabel(text)
    label.setStyleSheet(f"color: {COLOR_TEXT_SECONDARY}; font-style: italic;")
    layout.addWidget(label)
    layout.addStretch()

    row.setProperty("progressText", text)
    return row


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "MessageBubble",
    "create_progress_row",
    "STAGE_PROGRESS_OBJECT_NAME",
    "INLINE_IMAGE_OBJECT_NAME",
    "USER_MESSAGE_BG",
    "ASSISTANT_MESSAGE_BG",
]
