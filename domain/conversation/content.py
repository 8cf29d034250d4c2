# Message Content Model
"""
消息内容模型

职责：
- 定义消息内容的两种形态：纯文本（PlainText）与多模态（Multimodal）
- 定义多模态消息的内容片段（TextPart / ImagePart）
- 定义提交前的暂存图片（StagedImage）
- 提供发送时的打包逻辑 build_outgoing_content()
- 提供与后端 JSON 格式之间的互转

设计原则：
- MessageContent 是两分支的和类型，所有消费处按类型穷举分支
- 多模态片段顺序即渲染顺序，往返转换必须保持不变
- 纯数据结构，不依赖 Qt

使用示例：
    from domain.conversation.content import build_outgoing_content, StagedImage

    content = build_outgoing_content("hello", [StagedImage("data:image/png;base64,...", "a.png")])
    payload = content_to_wire(content)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Union


logger = logging.getLogger(__name__)


# ============================================================
# 后端 JSON 格式常量
# ============================================================

WIRE_TYPE_TEXT = "text"
WIRE_TYPE_IMAGE_URL = "image_url"


# ============================================================
# 内容片段
# ============================================================

@dataclass(frozen=True)
class TextPart:
    """文本片段"""
    text: str


@dataclass(frozen=True)
class ImagePart:
    """图片片段（url 为自包含的 data URI）"""
    url: str


ContentPart = Union[TextPart, ImagePart]


# ============================================================
# 消息内容
# ============================================================

@dataclass(frozen=True)
class PlainText:
    """纯文本消息内容"""
    text: str


@dataclass(frozen=True)
class Multimodal:
    """
    多模态消息内容

    parts 至少包含一个片段，顺序有意义。
    """
    parts: Tuple[ContentPart, ...]

    def __post_init__(self):
        if not self.parts:
            raise ValueError("Multimodal content requires at least one part")
        # 允许传入 list，统一为不可变 tuple
        object.__setattr__(self, "parts", tuple(self.parts))

    @property
    def text_parts(self) -> List[TextPart]:
        return [p for p in self.parts if isinstance(p, TextPart)]

    @property
    def image_parts(self) -> List[ImagePart]:
        return [p for p in self.parts if isinstance(p, ImagePart)]


MessageContent = Union[PlainText, Multimodal]


@dataclass(frozen=True)
class StagedImage:
    """
    已选择、尚未提交的图片

    仅存在于输入区，提交或移除后销毁，不属于任何 Turn。
    """
    data_url: str
    name: str


# ============================================================
# 打包
# ============================================================

def build_outgoing_content(
    text: str,
    staged_images: Sequence[StagedImage],
) -> MessageContent:
    """
    将输入文本和暂存图片打包为一条消息内容

    Args:
        text: 输入框文本（可能为空或仅空白）
        staged_images: 按选择顺序排列的暂存图片

    Returns:
        无图片时返回 PlainText(text)（即使 text 为空）；
        有图片时返回 Multimodal，文本非空白则在最前面放原始（未裁剪）文本，
        随后按顺序放每张图片。

    Note:
        调用方负责保证 text 与 staged_images 不同时为空。
    """
    if not staged_images:
        return PlainText(text)

    parts: List[ContentPart] = []
    if text.strip():
        parts.append(TextPart(text))
    for image in staged_images:
        parts.append(ImagePart(image.data_url))
    return Multimodal(tuple(parts))


# ============================================================
# 后端格式转换
# ============================================================

def content_to_wire(content: MessageContent) -> Union[str, List[Dict[str, Any]]]:
    """
    转换为后端 JSON 格式

    纯文本为字符串；多模态为片段列表：
        {"type": "text", "text": ...}
        {"type": "image_url", "image_url": {"url": ...}}
    """
    if isinstance(content, PlainText):
        return content.text
    if isinstance(content, Multimodal):
        wire_parts: List[Dict[str, Any]] = []
        for part in content.parts:
            if isinstance(part, TextPart):
                wire_parts.append({"type": WIRE_TYPE_TEXT, "text": part.text})
            elif isinstance(part, ImagePart):
                wire_parts.append({
                    "type": WIRE_TYPE_IMAGE_URL,
                    "image_url": {"url": part.url},
                })
            else:
                raise TypeError(f"Unsupported content part: {type(part).__name__}")
        return wire_parts
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def content_from_wire(raw: Any) -> MessageContent:
    """
    从后端 JSON 格式解析消息内容

    未知类型的片段会被跳过并记录警告；
    列表中没有任何可识别片段时回退为空的 PlainText。
    """
    if raw is None:
        return PlainText("")
    if isinstance(raw, str):
        return PlainText(raw)
    if isinstance(raw, list):
        parts: List[ContentPart] = []
        for item in raw:
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed content part: {item!r:.80}")
                continue
            part_type = item.get("type")
            if part_type == WIRE_TYPE_TEXT:
                parts.append(TextPart(item.get("text") or ""))
            elif part_type == WIRE_TYPE_IMAGE_URL:
                image_url = item.get("image_url") or {}
                parts.append(ImagePart(image_url.get("url") or ""))
            else:
                logger.warning(f"Skipping unknown content part type: {part_type}")
        if not parts:
            return PlainText("")
        return Multimodal(tuple(parts))
    raise TypeError(f"Unsupported wire content: {type(raw).__name__}")


__all__ = [
    "TextPart",
    "ImagePart",
    "ContentPart",
    "PlainText",
    "Multimodal",
    "MessageContent",
    "StagedImage",
    "build_outgoing_content",
    "content_to_wire",
    "content_from_wire",
]
