"""Integrity monitoring for an active exam window.

The monitor never changes the exam flow. It records what it sees (focus
loss, fullscreen exit, copy/paste, context menu and suspicious shortcuts)
and, when copy/paste prevention is on, swallows the offending event.

Architecture note:
    A single event filter is installed on the QApplication rather than on
    the window, because key presses and context menus are delivered to the
    focused child widget. Events are only considered when their receiver
    belongs to the watched window, and a propagated copy of an event (Qt
    resends ignored input events to the parent) is recognised and skipped
    so one user action yields one violation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import sys

from PySide6.QtCore import QEvent, QObject, Qt, Signal
from PySide6.QtGui import QKeyEvent, QKeySequence, QWindow
from PySide6.QtWidgets import QApplication, QWidget

from exam_app.core.models import Violation, ViolationType

logger = logging.getLogger(__name__)

_SCREENSHOT_KEYS_MAC = (Qt.Key.Key_3, Qt.Key.Key_4)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_window_fullscreen(window: QWidget) -> bool:
    """Cross-check the widget flag, the window state and the native window."""
    if window.isFullScreen():
        return True
    if window.windowState() & Qt.WindowState.WindowFullScreen:
        return True
    handle: QWindow | None = window.windowHandle()
    return handle is not None and handle.visibility() == QWindow.Visibility.FullScreen


class ProctoringMonitor(QObject):
    """Records violations for the lifetime of one attached window."""

    violation_recorded = Signal(object)
    focus_changed = Signal(bool)
    fullscreen_changed = Signal(bool)

    def __init__(
        self,
        on_violation: Callable[[Violation], None] | None = None,
        *,
        prevent_copy_paste: bool = False,
        fullscreen_mode: bool = False,
        clock: Callable[[], datetime] = _utcnow,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._on_violation = on_violation
        self._prevent_copy_paste = prevent_copy_paste
        self._fullscreen_mode = fullscreen_mode
        self._clock = clock
        self._window: QWidget | None = None
        self._violations: list[Violation] = []
        self._window_focused = True
        self._fullscreen = False
        self._last_signature: tuple | None = None
        self._last_receiver: QWidget | None = None

    @property
    def violations(self) -> tuple[Violation, ...]:
        return tuple(self._violations)

    @property
    def prevent_copy_paste(self) -> bool:
        return self._prevent_copy_paste

    def is_attached(self) -> bool:
        return self._window is not None

    def is_window_focused(self) -> bool:
        return self._window_focused

    def is_fullscreen(self) -> bool:
        return self._fullscreen

    def attach(self, window: QWidget) -> None:
        """Start watching ``window``. Attaching the same window twice is a no-op."""
        if self._window is window:
            logger.debug("Monitor already attached to this window")
            return
        if self._window is not None:
            raise RuntimeError("Monitor is already attached to another window.")
        app = QApplication.instance()
        if app is None:
            raise RuntimeError("A QApplication is required to monitor a window.")
        self._window = window
        self._window_focused = True
        self._fullscreen = is_window_fullscreen(window)
        app.installEventFilter(self)
        logger.info("Proctoring monitor attached")

    def detach(self) -> None:
        if self._window is None:
            return
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)
        self._window = None
        self._last_signature = None
        self._last_receiver = None
        logger.info("Proctoring monitor detached after %d violation(s)", len(self._violations))

    @contextmanager
    def watching(self, window: QWidget) -> Iterator[ProctoringMonitor]:
        """Attach for the duration of a ``with`` block and always detach."""
        self.attach(window)
        try:
            yield self
        finally:
            self.detach()

    def request_fullscreen(self, window: QWidget | None = None) -> None:
        """Best-effort switch to fullscreen; failures are ignored."""
        target = window or self._window
        if target is None:
            return
        try:
            target.showFullScreen()
        except RuntimeError as exc:
            logger.debug("Fullscreen request failed: %s", exc)
            return
        self._fullscreen = is_window_fullscreen(target)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        window = self._window
        if window is None:
            return False
        event_type = event.type()

        if watched is window:
            if event_type == QEvent.Type.WindowDeactivate:
                self._handle_window_blur()
            elif event_type == QEvent.Type.WindowActivate:
                self._window_focused = True
                self.focus_changed.emit(True)
            elif event_type == QEvent.Type.WindowStateChange:
                self._handle_window_state_change(window)

        if event_type not in (QEvent.Type.KeyPress, QEvent.Type.ContextMenu):
            return False
        if not self._belongs_to_window(watched, window):
            return False
        if self._is_propagated_copy(watched, event):
            return False

        if event_type == QEvent.Type.ContextMenu:
            self._record(ViolationType.CONTEXT_MENU, "Right-click context menu attempted")
            return self._prevent_copy_paste
        return self._handle_key_press(event)

    def _handle_window_blur(self) -> None:
        self._window_focused = False
        self.focus_changed.emit(False)
        self._record(ViolationType.WINDOW_BLUR, "Window lost focus")

    def _handle_window_state_change(self, window: QWidget) -> None:
        was_fullscreen = self._fullscreen
        self._fullscreen = is_window_fullscreen(window)
        if was_fullscreen != self._fullscreen:
            self.fullscreen_changed.emit(self._fullscreen)
        if self._fullscreen_mode and was_fullscreen and not self._fullscreen:
            self._record(ViolationType.FULLSCREEN_EXIT, "Exited fullscreen mode")

    def _handle_key_press(self, event: QKeyEvent) -> bool:
        key = event.key()
        modifiers = event.modifiers()

        if event.matches(QKeySequence.StandardKey.Copy) or event.matches(QKeySequence.StandardKey.Cut):
            self._record(ViolationType.COPY, "Attempted to copy content")
            return self._prevent_copy_paste
        if event.matches(QKeySequence.StandardKey.Paste):
            self._record(ViolationType.PASTE, "Attempted to paste content")
            return self._prevent_copy_paste

        shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)
        if key == Qt.Key.Key_Print or (
            sys.platform == "darwin" and shift and key in _SCREENSHOT_KEYS_MAC
        ):
            self._record(ViolationType.KEYBOARD_SHORTCUT, "Screenshot shortcut attempted")
        elif key == Qt.Key.Key_Tab and modifiers & Qt.KeyboardModifier.AltModifier:
            self._record(ViolationType.KEYBOARD_SHORTCUT, "Alt+Tab attempted")
        return False

    def _record(self, violation_type: ViolationType, detail: str) -> None:
        violation = Violation(type=violation_type, timestamp=self._clock(), detail=detail)
        self._violations.append(violation)
        logger.warning("Proctoring violation: %s (%s)", violation_type.value, detail)
        if self._on_violation is not None:
            self._on_violation(violation)
        self.violation_recorded.emit(violation)

    @staticmethod
    def _belongs_to_window(watched: QObject, window: QWidget) -> bool:
        if not isinstance(watched, QWidget):
            return False
        return watched is window or window.isAncestorOf(watched)

    def _is_propagated_copy(self, watched: QWidget, event: QEvent) -> bool:
        if isinstance(event, QKeyEvent):
            signature = (event.type(), event.key(), event.modifiers(), event.timestamp())
        else:
            signature = (event.type(), event.globalPos().x(), event.globalPos().y(), event.timestamp())
        previous = self._last_receiver
        propagated = (
            signature == self._last_signature
            and previous is not None
            and previous is not watched
            and watched.isAncestorOf(previous)
        )
        self._last_signature = signature
        self._last_receiver = watched
        return propagated
