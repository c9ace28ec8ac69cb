from __future__ import annotations

import pytest

from exam_app.core.errors import TimerCallbackError
from exam_app.core.services.countdown_timer import CountdownTimer, format_clock


def _tick(timer: CountdownTimer, count: int) -> None:
    for _ in range(count):
        timer.tick()


def test_one_minute_fires_once_after_sixty_ticks():
    calls = []
    timer = CountdownTimer(1, on_time_up=lambda: calls.append(timer.remaining_seconds))
    timer.start()

    _tick(timer, 59)
    assert calls == []

    timer.tick()
    assert calls == [0]
    assert timer.has_fired()
    assert not timer.is_running()


def test_stray_ticks_after_zero_do_not_fire_again():
    calls = []
    expired = []
    timer = CountdownTimer(1, on_time_up=lambda: calls.append(1))
    timer.expired.connect(lambda: expired.append(1))
    timer.start()

    _tick(timer, 75)

    assert calls == [1]
    assert expired == [1]
    assert timer.remaining_seconds == 0


def test_remaining_changed_reports_every_second():
    seen = []
    timer = CountdownTimer(1)
    timer.remaining_changed.connect(seen.append)
    timer.start()

    _tick(timer, 3)

    assert seen == [59, 58, 57]


def test_zero_minute_timer_fires_on_start():
    calls = []
    timer = CountdownTimer(0, on_time_up=lambda: calls.append(1))

    timer.start()
    timer.start()

    assert calls == [1]


def test_negative_minutes_rejected():
    with pytest.raises(ValueError):
        CountdownTimer(-1)


def test_locked_timer_refuses_pause_resume_and_reset():
    timer = CountdownTimer(5)
    timer.start()
    timer.lock()

    for action in (timer.pause, timer.resume, timer.reset):
        with pytest.raises(RuntimeError):
            action()
    assert timer.is_running()


def test_pause_resume_and_reset_when_unlocked():
    timer = CountdownTimer(2)
    timer.start()
    _tick(timer, 10)

    timer.pause()
    assert not timer.is_running()
    timer.resume()
    assert timer.is_running()

    timer.reset()
    assert timer.remaining_seconds == 120
    assert not timer.has_started()


def test_callback_error_is_logged_and_expiry_still_counts(caplog):
    expired = []

    def explode() -> None:
        raise ValueError("boom")

    timer = CountdownTimer(1, on_time_up=explode)
    timer.expired.connect(lambda: expired.append(1))
    timer.start()

    _tick(timer, 62)

    assert timer.has_fired()
    assert isinstance(timer.last_callback_error, TimerCallbackError)
    assert expired == [1]
    assert "Time-up handler failed" in caplog.text


def test_warning_levels_follow_thresholds():
    timer = CountdownTimer(10)
    timer.start()
    assert timer.warning_level() == "normal"

    _tick(timer, 300)
    assert timer.warning_level() == "warning"

    _tick(timer, 240)
    assert timer.remaining_seconds == 60
    assert timer.warning_level() == "critical"


def test_progress_fraction():
    timer = CountdownTimer(1)
    timer.start()
    _tick(timer, 15)

    assert timer.progress_fraction() == pytest.approx(0.25)


def test_format_clock():
    assert format_clock(3725) == "1:02:05"
    assert format_clock(65) == "1:05"
    assert format_clock(-4) == "0:00"
