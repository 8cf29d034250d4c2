"""data URL 编解码与异步读取"""

import asyncio

import pytest

from infrastructure.utils.data_url import (
    AttachmentReadError,
    decode_data_url,
    encode_data_url,
    guess_mime_type,
    read_file_as_data_url,
)


def test_encode_and_decode():
    url = encode_data_url(b"\x89PNG", "image/png")

    assert url.startswith("data:image/png;base64,")
    assert decode_data_url(url) == ("image/png", b"\x89PNG")


def test_decode_rejects_non_data_url():
    with pytest.raises(ValueError):
        decode_data_url("https://example.com/a.png")


def test_decode_rejects_bad_payload():
    with pytest.raises(ValueError):
        decode_data_url("data:image/png;base64,***")


def test_guess_mime_type():
    assert guess_mime_type("photo.jpg") == "image/jpeg"
    assert guess_mime_type("blob") == "application/octet-stream"


def test_read_file(tmp_path):
    path = tmp_path / "dot.png"
    path.write_bytes(b"abc")

    url = asyncio.run(read_file_as_data_url(path))

    assert url == "data:image/png;base64,YWJj"


def test_read_missing_file(tmp_path):
    with pytest.raises(AttachmentReadError) as exc_info:
        asyncio.run(read_file_as_data_url(tmp_path / "missing.png"))
    assert exc_info.value.path.endswith("missing.png")
