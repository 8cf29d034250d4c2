"""错误处理：分类、事件发布、用户通知"""

from unittest import mock

from infrastructure.council_api.council_client import (
    CouncilApiError,
    CouncilConnectionError,
    CouncilTimeoutError,
)
from infrastructure.utils.data_url import AttachmentReadError
from shared.error_handler import ErrorHandler
from shared.error_types import ErrorCategory, ErrorType
from shared.event_bus import EventBus
from shared.event_types import EVENT_ERROR_OCCURRED
from shared.service_locator import ServiceLocator
from shared.service_names import SVC_EVENT_BUS


def test_classification():
    handler = ErrorHandler()

    assert handler.classify_error(CouncilApiError("x", status_code=404)) == (
        ErrorCategory.USER_ACTIONABLE, ErrorType.COUNCIL_NOT_FOUND,
    )
    assert handler.classify_error(CouncilApiError("x", status_code=500))[1] == (
        ErrorType.COUNCIL_HTTP_ERROR
    )
    assert handler.classify_error(CouncilTimeoutError("slow"))[1] == ErrorType.NETWORK_TIMEOUT
    assert handler.classify_error(CouncilConnectionError("down"))[1] == (
        ErrorType.NETWORK_CONNECTION
    )
    assert handler.classify_error(AttachmentReadError("a.png", "gone"))[1] == (
        ErrorType.ATTACHMENT_READ
    )
    assert handler.classify_error(MemoryError())[0] == ErrorCategory.FATAL


def test_handle_error_publishes_and_notifies():
    bus = EventBus()
    ServiceLocator.register(SVC_EVENT_BUS, bus)
    events = []
    bus.subscribe(EVENT_ERROR_OCCURRED, events.append)

    handler = ErrorHandler()
    notify = mock.Mock()
    handler.set_notify_callback(notify)

    handler.handle_error(CouncilTimeoutError("slow"), context={"operation": "send_message"})

    assert events[0]["data"]["error_type"] == "network_timeout"
    assert events[0]["data"]["context"] == {"operation": "send_message"}
    notify.assert_called_once()
    assert notify.call_args.kwargs["error_type"] == ErrorType.NETWORK_TIMEOUT


def test_failing_notify_callback_is_contained():
    handler = ErrorHandler()
    handler.set_notify_callback(mock.Mock(side_effect=RuntimeError("ui gone")))

    category, error_type, _ = handler.handle_error(ValueError("boom"))

    assert error_type == ErrorType.UNKNOWN
    assert category == ErrorCategory.USER_ACTIONABLE
