"""共享服务：服务定位器、事件总线、国际化、Markdown 渲染"""

import pytest

from infrastructure.utils.markdown_renderer import render_document, render_markdown
from shared.event_bus import EventBus
from shared.event_types import EVENT_LANGUAGE_CHANGED
from shared.i18n_manager import LANG_ZH_CN, I18nManager
from shared.service_locator import ServiceLocator, ServiceNotFoundError
from shared.service_names import SVC_EVENT_BUS


class TestServiceLocator:

    def test_register_and_get(self):
        service = object()
        ServiceLocator.register("svc", service)

        assert ServiceLocator.get("svc") is service
        assert ServiceLocator.has("svc")

    def test_missing_service(self):
        with pytest.raises(ServiceNotFoundError):
            ServiceLocator.get("missing")
        assert ServiceLocator.get_optional("missing") is None

    def test_none_rejected(self):
        with pytest.raises(ValueError):
            ServiceLocator.register("svc", None)


class TestEventBus:

    def test_publish_envelope(self):
        bus = EventBus()
        received = []
        bus.subscribe("custom", received.append)

        bus.publish("custom", {"x": 1}, source="test")

        assert received[0]["type"] == "custom"
        assert received[0]["data"] == {"x": 1}
        assert received[0]["source"] == "test"

    def test_failing_handler_does_not_block_others(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("handler bug")

        bus.subscribe("custom", broken)
        bus.subscribe("custom", received.append)
        bus.publish("custom")

        assert len(received) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe("custom", received.append)

        assert bus.unsubscribe("custom", received.append)
        bus.publish("custom")

        assert received == []
        assert bus.get_subscriber_count("custom") == 0


class TestI18nManager:

    def test_english_text_and_placeholder(self):
        i18n = I18nManager()

        assert i18n.get_text("btn.send") == "Send"
        assert i18n.get_text("stage3.chairman", model="gemini") == "Chairman: gemini"

    def test_missing_key_falls_back(self):
        i18n = I18nManager()

        assert i18n.get_text("no.such.key", "fallback") == "fallback"
        assert i18n.get_text("no.such.key") == "no.such.key"

    def test_set_language_publishes_event(self):
        bus = EventBus()
        ServiceLocator.register(SVC_EVENT_BUS, bus)
        received = []
        bus.subscribe(EVENT_LANGUAGE_CHANGED, received.append)
        i18n = I18nManager()

        assert i18n.set_language(LANG_ZH_CN)
        assert i18n.get_current_language() == LANG_ZH_CN
        assert received[0]["data"]["new_language"] == LANG_ZH_CN
        assert not i18n.set_language("fr_FR")


class TestMarkdownRenderer:

    def test_basic_markdown(self):
        assert "<strong>gpt-4o</strong>" in render_markdown("**gpt-4o** ranks first")

    def test_raw_html_is_escaped(self):
        html = render_markdown("<script>alert(1)</script>")
        assert "<script>" not in html

    def test_tables_only_with_gfm(self):
        table = "| a | b |\n|---|---|\n| 1 | 2 |"
        assert "<table>" in render_markdown(table)
        assert "<table>" not in render_markdown(table, gfm=False)

    def test_empty_text(self):
        assert render_markdown("") == ""
        assert render_document("x").startswith("<style>")
