# Attachment Manager Component
"""
附件管理器

职责：
- 并发读取用户选择的图片，编码为 data URL 暂存
- 预览已暂存的图片（缩略图 + 删除按钮）
- 提供暂存列表访问，发送成功后清空

批量语义：
- 一次选择的所有文件全部读取成功后才一起加入列表（按选择顺序）
- 任一文件读取失败则整批丢弃，列表保持不变，并且只发出一次 attachment_error

信号：
- attachments_changed(count) - 附件数量变化
- attachment_error(message) - 附件错误
"""

import asyncio
import logging
import os
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from PyQt6.QtCore import pyqtSignal, Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import (
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QLabel,
    QFrame,
    QToolButton,
)

from domain.conversation import StagedImage
from infrastructure.config.settings import ATTACHMENT_THUMBNAIL_SIZE
from infrastructure.utils.data_url import (
    AttachmentReadError,
    decode_data_url,
    read_file_as_data_url,
)


# ============================================================
# 常量定义
# ============================================================

# 批量读取失败时的提示
LOAD_FAILED_MESSAGE = "Failed to load images. Please try again."

# 文件读取函数：路径 -> data URL
FileReader = Callable[[str], Awaitable[str]]


class AttachmentManager(QWidget):
    """
    附件管理器组件

    reader 可注入，测试时用假的读取函数控制完成顺序和失败。
    """

    attachments_changed = pyqtSignal(int)
    attachment_error = pyqtSignal(str)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        reader: Optional[FileReader] = None,
    ):
        super().__init__(parent)

        self._reader: FileReader = reader or read_file_as_data_url
        self._images: List[StagedImage] = []
        self._i18n = None
        self._error_handler = None
        self._logger = logging.getLogger("attachment_manager")

        self._preview_layout: Optional[QHBoxLayout] = None
        self._setup_ui()

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def i18n(self):
        if self._i18n is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_I18N_MANAGER
            self._i18n = ServiceLocator.get_optional(SVC_I18N_MANAGER)
        return self._i18n

    @property
    def error_handler(self):
        if self._error_handler is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_ERROR_HANDLER
            self._error_handler = ServiceLocator.get_optional(SVC_ERROR_HANDLER)
        return self._error_handler

    def _get_text(self, key: str, default: str = "") -> str:
        if self.i18n:
            return self.i18n.get_text(key, default)
        return default

    # ============================================================
    # UI 初始化
    # ============================================================

    def _setup_ui(self) -> None:
        self.setVisible(False)

        self._preview_layout = QHBoxLayout(self)
        self._preview_layout.setContentsMargins(0, 0, 0, 0)
        self._preview_layout.setSpacing(6)
        self._preview_layout.addStretch()

    # ============================================================
    # 公共方法
    # ============================================================

    @property
    def images(self) -> Tuple[StagedImage, ...]:
        """当前暂存的图片（只读快照）"""
        return tuple(self._images)

    def count(self) -> int:
        return len(self._images)

    async def select_files(self, paths: Sequence[str]) -> bool:
        """
        并发读取一批文件并暂存

        所有读取完成前不修改列表；全部成功后按 paths 顺序追加。

        Returns:
            是否成功（空列表视为成功）
        """
        paths = list(paths)
        if not paths:
            return True

        results = await asyncio.gather(
            *(self._reader(path) for path in paths),
            return_exceptions=True,
        )

        failures = []
        for path, result in zip(paths, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                failures.append((path, result))

        if failures:
            for path, error in failures:
                self._logger.error(f"Failed to read attachment {path}: {error}")
            self._report_failure(paths, failures)
            self.attachment_error.emit(
                self._get_text("attachment.load_failed", LOAD_FAILED_MESSAGE)
            )
            return False

        self._images.extend(
            StagedImage(data_url=data_url, name=os.path.basename(path))
            for path, data_url in zip(paths, results)
        )
        self._logger.debug(f"Staged {len(paths)} images, total {len(self._images)}")
        self._refresh()
        return True

    def _report_failure(self, paths: List[str], failures) -> None:
        """整批失败交给 ErrorHandler 分类并发布事件，用户提示由 attachment_error 负责"""
        if self.error_handler is None:
            return
        path, error = failures[0]
        if not isinstance(error, AttachmentReadError):
            error = AttachmentReadError(path, str(error))
        self.error_handler.handle_error(
            error,
            context={
                "operation": "select_files",
                "selected": len(paths),
                "failed": len(failures),
            },
            notify=False,
        )

    def remove_image(self, index: int) -> StagedImage:
        """
        移除指定位置的图片

        Raises:
            IndexError: 索引越界
        """
        if not 0 <= index < len(self._images):
            raise IndexError(f"Attachment index out of range: {index}")

        removed = self._images.pop(index)
        self._logger.debug(f"Removed attachment: {removed.name}")
        self._refresh()
        return removed

    def clear(self) -> None:
        if not self._images:
            return
        self._images.clear()
        self._refresh()

    # ============================================================
    # UI 更新
    # ============================================================

    def _refresh(self) -> None:
        self._update_preview_ui()
        self.attachments_changed.emit(len(self._images))

    def _update_preview_ui(self) -> None:
        # 保留最后的 stretch
        while self._preview_layout.count() > 1:
            item = self._preview_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

        for i, image in enumerate(self._images):
            self._preview_layout.insertWidget(i, self._create_preview_item(image, i))

        self.setVisible(bool(self._images))

    def _create_preview_item(self, image: StagedImage, index: int) -> QWidget:
        container = QFrame()
        container.setObjectName("attachmentPreview")
        container.setStyleSheet("""
            QFrame#attachmentPreview {
                background-color: #f0f0f0;
                border: 1px solid #e0e0e0;
                border-radius: 4px;
            }
        """)

        layout = QVBoxLayout(container)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(2)

        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        header.addStretch()

        delete_btn = QToolButton()
        delete_btn.setText("×")
        delete_btn.setFixedSize(18, 18)
        delete_btn.setToolTip(self._get_text("attachment.remove", "Remove image"))
        delete_btn.setStyleSheet("""
            QToolButton {
                background-color: transparent;
                border: none;
                border-radius: 9px;
            }
            QToolButton:hover {
                background-color: rgba(0, 0, 0, 0.1);
            }
        """)
        delete_btn.clicked.connect(lambda _checked=False, i=index: self.remove_image(i))
        header.addWidget(delete_btn)
        layout.addLayout(header)

        thumbnail = QLabel()
        thumbnail.setAlignment(Qt.AlignmentFlag.AlignCenter)
        pixmap = self._thumbnail_pixmap(image)
        if pixmap is not None:
            thumbnail.setPixmap(pixmap)
        else:
            thumbnail.setText(self._truncate_filename(image.name))
        thumbnail.setToolTip(image.name)
        layout.addWidget(thumbnail)

        return container

    def _thumbnail_pixmap(self, image: StagedImage) -> Optional[QPixmap]:
        try:
            _, data = decode_data_url(image.data_url)
        except ValueError:
            return None

        pixmap = QPixmap()
        if not pixmap.loadFromData(data):
            return None
        return pixmap.scaled(
            ATTACHMENT_THUMBNAIL_SIZE,
            ATTACHMENT_THUMBNAIL_SIZE,
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )

    def _truncate_filename(self, name: str, max_length: int = 12) -> str:
        if len(name) <= max_length:
            return name

        base, ext = os.path.splitext(name)
        max_base_len = max_length - len(ext) - 3
        if max_base_len > 3:
            return base[:max_base_len] + "..." + ext
        return name[:max_length - 3] + "..."


__all__ = [
    "AttachmentManager",
    "LOAD_FAILED_MESSAGE",
]
