# Data URL Utilities
"""
Data URL 编解码与异步文件读取

职责：
- 将本地图片文件编码为 data URL（data:<mime>;base64,<payload>）
- 将 data URL 解码回 MIME 类型和字节
- 提供非阻塞的文件读取接口，供附件管理器并发调用

设计原则：
- 同步读取通过 asyncio.to_thread() 卸载到线程池，事件循环不被阻塞
- 读取失败统一包装为 AttachmentReadError，保留原始异常

使用示例：
    from infrastructure.utils.data_url import read_file_as_data_url

    data_url = await read_file_as_data_url("/tmp/diagram.png")
    # -> "data:image/png;base64,iVBORw0KGgo..."
"""

import asyncio
import base64
import binascii
import mimetypes
from pathlib import Path
from typing import Tuple, Union

from infrastructure.config.settings import DEFAULT_IMAGE_MIME_TYPE


DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


class AttachmentReadError(Exception):
    """附件文件读取失败"""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = str(path)
        self.reason = reason


def guess_mime_type(path: Union[str, Path]) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or DEFAULT_IMAGE_MIME_TYPE


def encode_data_url(data: bytes, mime_type: str) -> str:
    payload = base64.b64encode(data).decode("ascii")
    return f"{DATA_URL_PREFIX}{mime_type}{_BASE64_MARKER}{payload}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    解码 base64 data URL

    Returns:
        (mime_type, data)

    Raises:
        ValueError: 不是 base64 data URL 或负载无法解码
    """
    if not data_url.startswith(DATA_URL_PREFIX) or _BASE64_MARKER not in data_url:
        raise ValueError("Not a base64 data URL")

    header, payload = data_url[len(DATA_URL_PREFIX):].split(_BASE64_MARKER, 1)
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return header or DEFAULT_IMAGE_MIME_TYPE, data


def _read_file_as_data_url_sync(path: Path) -> str:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise AttachmentReadError(path, e.strerror or str(e)) from e
    return encode_data_url(data, guess_mime_type(path))


async def read_file_as_data_url(path: Union[str, Path]) -> str:
    """
    异步读取文件并编码为 data URL

    Raises:
        AttachmentReadError: 文件不存在、无权限或读取失败
    """
    return await asyncio.to_thread(_read_file_as_data_url_sync, Path(path))


__all__ = [
    "AttachmentReadError",
    "guess_mime_type",
    "encode_data_url",
    "decode_data_url",
    "read_file_as_data_url",
]
