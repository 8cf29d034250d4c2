# Test Fixtures
"""
测试公共夹具

- 无显示环境下使用 offscreen 平台
- 整个测试会话共用一个 QApplication
- 每个测试前后清空 ServiceLocator，避免服务泄漏到其他测试
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from domain.conversation import Conversation, PlainText, Turn
from shared.service_locator import ServiceLocator


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def clean_service_locator():
    ServiceLocator.clear()
    yield
    ServiceLocator.clear()


@pytest.fixture
def empty_conversation():
    return Conversation(id="conv-1", title="New Conversation")


@pytest.fixture
def conversation_with_turns():
    """一问一答，助手轮次三个阶段都已完成"""
    assistant = Turn.assistant()
    assistant.stage1 = [
        {"model": "openai/gpt-4o", "response": "Answer from GPT"},
        {"model": "anthropic/claude", "response": "Answer from Claude"},
    ]
    assistant.stage2 = [
        {
            "model": "openai/gpt-4o",
            "ranking": "Response B is better than Response A",
            "parsed_ranking": ["Response B", "Response A"],
        },
    ]
    assistant.stage3 = {"model": "google/gemini", "response": "Final answer"}
    return Conversation(
        id="conv-2",
        title="Sorting",
        turns=[Turn.user(PlainText("Which sort?")), assistant],
    )
