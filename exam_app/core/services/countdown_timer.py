"""Countdown timer that owns the remaining time of an attempt."""

from __future__ import annotations

from collections.abc import Callable
import logging

from PySide6.QtCore import QObject, QTimer, Signal

from exam_app.constants.exam_constants import (
    TIMER_TICK_INTERVAL_MS,
    TIMER_WARNING_THRESHOLD_MINUTES,
)
from exam_app.core.errors import TimerCallbackError

logger = logging.getLogger(__name__)


class CountdownTimer(QObject):
    """Counts down whole seconds and calls ``on_time_up`` exactly once.

    Each tick of the repeating ``QTimer`` removes one second. Reaching zero
    is terminal: the tick is cancelled and the expiry handler runs once, no
    matter how many further ticks arrive. Once ``lock()`` has been called
    (monitored exam sessions), pause, resume and reset are refused.
    """

    remaining_changed = Signal(int)
    expired = Signal()

    def __init__(
        self,
        total_minutes: int,
        on_time_up: Callable[[], None] | None = None,
        *,
        warning_threshold_minutes: int = TIMER_WARNING_THRESHOLD_MINUTES,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        if total_minutes < 0:
            raise ValueError("Timer minutes must not be negative.")
        self._total_seconds = total_minutes * 60
        self._remaining = self._total_seconds
        self._on_time_up = on_time_up
        self._warning_threshold_minutes = warning_threshold_minutes
        self._running = False
        self._started = False
        self._locked = False
        self._time_up_fired = False
        self.last_callback_error: TimerCallbackError | None = None

        self._qtimer = QTimer(self)
        self._qtimer.setInterval(TIMER_TICK_INTERVAL_MS)
        self._qtimer.timeout.connect(self.tick)

    @property
    def total_seconds(self) -> int:
        return self._total_seconds

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    def is_running(self) -> bool:
        return self._running

    def has_started(self) -> bool:
        return self._started

    def has_fired(self) -> bool:
        return self._time_up_fired

    def is_locked(self) -> bool:
        return self._locked

    def start(self) -> None:
        if self._time_up_fired:
            logger.debug("Ignoring start on an expired timer")
            return
        self._started = True
        self._running = True
        if self._remaining <= 0:
            self._fire_time_up()
            return
        self._qtimer.start()

    def lock(self) -> None:
        """Disable pause, resume and reset for the rest of the attempt."""
        self._locked = True

    def pause(self) -> None:
        self._ensure_unlocked("paused")
        self._running = False
        self._qtimer.stop()

    def resume(self) -> None:
        self._ensure_unlocked("resumed")
        if not self._started or self._time_up_fired:
            return
        self._running = True
        self._qtimer.start()

    def reset(self) -> None:
        self._ensure_unlocked("reset")
        self._qtimer.stop()
        self._remaining = self._total_seconds
        self._running = False
        self._started = False
        self._time_up_fired = False
        self.remaining_changed.emit(self._remaining)

    def stop(self) -> None:
        """Cancel the repeating tick; used on teardown."""
        self._running = False
        self._qtimer.stop()

    def tick(self) -> None:
        """Remove one second. Redundant ticks at zero are ignored."""
        if self._time_up_fired or self._remaining <= 0:
            return
        self._remaining -= 1
        self.remaining_changed.emit(self._remaining)
        if self._remaining == 0:
            self._fire_time_up()

    def _fire_time_up(self) -> None:
        if self._time_up_fired:
            return
        self._time_up_fired = True
        self._running = False
        self._qtimer.stop()
        logger.info("Countdown reached zero after %s seconds", self._total_seconds)
        if self._on_time_up is not None:
            try:
                self._on_time_up()
            except Exception as exc:
                self.last_callback_error = TimerCallbackError(str(exc))
                logger.exception("Time-up handler failed; expiry still recorded")
        self.expired.emit()

    def _ensure_unlocked(self, action: str) -> None:
        if self._locked:
            raise RuntimeError(f"Timer cannot be {action} during a monitored session.")

    def warning_level(self) -> str:
        """``critical`` in the last minute, ``warning`` inside the threshold."""
        if self._remaining <= 60:
            return "critical"
        if self._remaining <= self._warning_threshold_minutes * 60:
            return "warning"
        return "normal"

    def progress_fraction(self) -> float:
        """Share of the budget already used, from 0.0 to 1.0."""
        if self._total_seconds <= 0:
            return 1.0
        return (self._total_seconds - self._remaining) / self._total_seconds

    def format_clock(self) -> str:
        return format_clock(self._remaining)


def format_clock(seconds: int) -> str:
    hours, rest = divmod(max(0, seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
