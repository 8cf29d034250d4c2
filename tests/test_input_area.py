"""输入区键盘约定"""

from PyQt6.QtCore import QEvent, Qt
from PyQt6.QtGui import QKeyEvent, QTextCursor
from PyQt6.QtWidgets import QApplication

from presentation.panels.conversation.input_area import InputArea, is_submit_key


NO_MODIFIER = Qt.KeyboardModifier.NoModifier
SHIFT = Qt.KeyboardModifier.ShiftModifier


def test_enter_submits():
    assert is_submit_key(Qt.Key.Key_Return, NO_MODIFIER)
    assert is_submit_key(Qt.Key.Key_Enter, NO_MODIFIER)


def test_shift_enter_inserts_newline():
    assert not is_submit_key(Qt.Key.Key_Return, SHIFT)


def test_other_keys_do_not_submit():
    assert not is_submit_key(Qt.Key.Key_A, NO_MODIFIER)


def test_busy_makes_text_read_only(qapp):
    area = InputArea()
    area.set_busy(True)

    assert area._input_text.isReadOnly()
    assert not area._attach_button.isEnabled()

    area.set_busy(False)
    assert not area._input_text.isReadOnly()


def test_send_button_starts_disabled(qapp):
    area = InputArea()
    assert not area.is_send_enabled()


def _press(widget, key, modifiers=NO_MODIFIER, text="\r"):
    QApplication.sendEvent(widget, QKeyEvent(QEvent.Type.KeyPress, key, modifiers, text))


def test_key_presses_in_text_box(qapp):
    area = InputArea()
    sent = []
    area.send_clicked.connect(lambda: sent.append(True))
    area.set_text("hi")
    area._input_text.moveCursor(QTextCursor.MoveOperation.End)

    _press(area._input_text, Qt.Key.Key_Return, SHIFT)

    assert area.get_text() == "hi\n"
    assert sent == []

    _press(area._input_text, Qt.Key.Key_Return)

    assert sent == [True]
    assert area.get_text() == "hi\n"
