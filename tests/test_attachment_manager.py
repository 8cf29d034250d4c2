"""附件管理器：批量并发读取、整批失败、移除"""

import asyncio
from unittest import mock

import pytest

from domain.conversation import StagedImage
from presentation.panels.conversation.attachment_manager import (
    AttachmentManager,
    LOAD_FAILED_MESSAGE,
)
from shared.error_handler import ErrorHandler
from shared.event_bus import EventBus
from shared.event_types import EVENT_ERROR_OCCURRED
from shared.service_locator import ServiceLocator
from shared.service_names import SVC_ERROR_HANDLER, SVC_EVENT_BUS


class FakeReader:
    """按路径控制耗时和失败的假读取函数，记录完成顺序"""

    def __init__(self, delays=None, failing=()):
        self.delays = delays or {}
        self.failing = set(failing)
        self.completed = []

    async def __call__(self, path):
        await asyncio.sleep(self.delays.get(path, 0))
        if path in self.failing:
            raise OSError(f"cannot read {path}")
        self.completed.append(path)
        return f"data:image/png;base64,{path}"


@pytest.fixture
def errors():
    return []


def _manager(qapp, reader, errors):
    manager = AttachmentManager(reader=reader)
    manager.attachment_error.connect(errors.append)
    return manager


def test_batch_is_appended_in_selection_order(qapp, errors):
    reader = FakeReader(delays={"/tmp/a.png": 0.05, "/tmp/b.png": 0.0})
    manager = _manager(qapp, reader, errors)

    ok = asyncio.run(manager.select_files(["/tmp/a.png", "/tmp/b.png"]))

    assert ok
    assert reader.completed == ["/tmp/b.png", "/tmp/a.png"]
    assert [img.name for img in manager.images] == ["a.png", "b.png"]
    assert manager.images[0].data_url == "data:image/png;base64,/tmp/a.png"
    assert errors == []


def test_later_batch_is_appended_after_existing(qapp, errors):
    manager = _manager(qapp, FakeReader(), errors)
    asyncio.run(manager.select_files(["/x/one.png"]))
    asyncio.run(manager.select_files(["/x/two.png", "/x/three.png"]))

    assert [img.name for img in manager.images] == ["one.png", "two.png", "three.png"]


def test_failed_batch_leaves_state_unchanged(qapp, errors):
    manager = _manager(qapp, FakeReader(), errors)
    asyncio.run(manager.select_files(["/x/keep.png"]))
    before = manager.images

    reader = FakeReader(failing={"/x/bad1.png", "/x/bad2.png"})
    manager._reader = reader
    ok = asyncio.run(manager.select_files(["/x/good.png", "/x/bad1.png", "/x/bad2.png"]))

    assert not ok
    assert manager.images == before
    assert errors == [LOAD_FAILED_MESSAGE]


def test_failed_batch_is_classified_by_error_handler(qapp, errors):
    bus = EventBus()
    ServiceLocator.register(SVC_EVENT_BUS, bus)
    handler = ErrorHandler()
    notify = mock.Mock()
    handler.set_notify_callback(notify)
    ServiceLocator.register(SVC_ERROR_HANDLER, handler)
    events = []
    bus.subscribe(EVENT_ERROR_OCCURRED, events.append)

    manager = _manager(qapp, FakeReader(failing={"/x/bad.png"}), errors)
    ok = asyncio.run(manager.select_files(["/x/good.png", "/x/bad.png"]))

    assert not ok
    assert len(events) == 1
    data = events[0]["data"]
    assert data["error_type"] == "attachment_read"
    assert data["context"] == {"operation": "select_files", "selected": 2, "failed": 1}
    assert "/x/bad.png" in data["message"]
    notify.assert_not_called()
    assert errors == [LOAD_FAILED_MESSAGE]


def test_empty_selection_is_noop(qapp, errors):
    changes = []
    manager = _manager(qapp, FakeReader(), errors)
    manager.attachments_changed.connect(changes.append)

    assert asyncio.run(manager.select_files([]))
    assert manager.count() == 0
    assert changes == []


def test_remove_image_by_index(qapp, errors):
    changes = []
    manager = _manager(qapp, FakeReader(), errors)
    asyncio.run(manager.select_files(["/x/a.png", "/x/b.png", "/x/c.png"]))
    manager.attachments_changed.connect(changes.append)

    removed = manager.remove_image(1)

    assert removed == StagedImage("data:image/png;base64,/x/b.png", "b.png")
    assert [img.name for img in manager.images] == ["a.png", "c.png"]
    assert changes == [2]


def test_remove_image_out_of_range(qapp, errors):
    manager = _manager(qapp, FakeReader(), errors)
    asyncio.run(manager.select_files(["/x/a.png"]))

    with pytest.raises(IndexError):
        manager.remove_image(1)
    with pytest.raises(IndexError):
        manager.remove_image(-1)
    assert manager.count() == 1


def test_clear(qapp, errors):
    manager = _manager(qapp, FakeReader(), errors)
    asyncio.run(manager.select_files(["/x/a.png"]))

    manager.clear()

    assert manager.images == ()
    assert manager.isHidden()


def test_truncate_filename(qapp, errors):
    manager = _manager(qapp, FakeReader(), errors)
    assert manager._truncate_filename("short.png") == "short.png"
    assert manager._truncate_filename("a_very_long_name.png") == "a_ver....png"
