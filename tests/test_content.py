"""消息内容打包与后端格式转换"""

import pytest

from domain.conversation.content import (
    ImagePart,
    Multimodal,
    PlainText,
    StagedImage,
    TextPart,
    build_outgoing_content,
    content_from_wire,
    content_to_wire,
)


PNG_A = StagedImage("data:image/png;base64,AAAA", "a.png")
PNG_B = StagedImage("data:image/png;base64,BBBB", "b.png")


class TestBuildOutgoingContent:

    def test_text_only_is_plain_text(self):
        assert build_outgoing_content("hello", []) == PlainText("hello")

    def test_text_is_not_trimmed(self):
        assert build_outgoing_content("  hi  ", []) == PlainText("  hi  ")

    def test_text_and_images_keep_order(self):
        content = build_outgoing_content("look", [PNG_A, PNG_B])

        assert isinstance(content, Multimodal)
        assert content.parts == (
            TextPart("look"),
            ImagePart(PNG_A.data_url),
            ImagePart(PNG_B.data_url),
        )

    def test_whitespace_text_with_image_has_no_text_part(self):
        content = build_outgoing_content("   \n", [PNG_A])

        assert content == Multimodal((ImagePart(PNG_A.data_url),))
        assert content.text_parts == []

    def test_original_text_is_kept_in_text_part(self):
        content = build_outgoing_content(" spaced ", [PNG_A])
        assert content.parts[0] == TextPart(" spaced ")


class TestMultimodal:

    def test_empty_parts_rejected(self):
        with pytest.raises(ValueError):
            Multimodal(())

    def test_list_parts_normalized_to_tuple(self):
        content = Multimodal([TextPart("a")])
        assert isinstance(content.parts, tuple)


class TestWireFormat:

    def test_plain_text_is_string(self):
        assert content_to_wire(PlainText("hi")) == "hi"

    def test_multimodal_parts(self):
        wire = content_to_wire(build_outgoing_content("q", [PNG_A]))
        assert wire == [
            {"type": "text", "text": "q"},
            {"type": "image_url", "image_url": {"url": PNG_A.data_url}},
        ]

    def test_from_wire_preserves_part_order(self):
        raw = [
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,AA=="}},
            {"type": "text", "text": "after"},
        ]
        content = content_from_wire(raw)

        assert content == Multimodal((
            ImagePart("data:image/png;base64,AA=="),
            TextPart("after"),
        ))
        assert content_to_wire(content) == raw

    def test_unknown_part_is_skipped(self):
        content = content_from_wire([
            {"type": "audio", "data": "..."},
            {"type": "text", "text": "kept"},
        ])
        assert content == Multimodal((TextPart("kept"),))

    def test_no_recognized_parts_falls_back_to_empty_text(self):
        assert content_from_wire([{"type": "video"}]) == PlainText("")

    def test_none_is_empty_text(self):
        assert content_from_wire(None) == PlainText("")

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            content_from_wire(42)
