from __future__ import annotations

import pytest

from proctor_app.core.clock import Countdown, ManualScheduler


def test_countdown_ticks_every_second_then_expires() -> None:
    scheduler = ManualScheduler()
    ticks: list[int] = []
    expired: list[float] = []
    countdown = Countdown(scheduler, 3, on_tick=ticks.append, on_expire=lambda: expired.append(scheduler.now()))
    countdown.start()

    scheduler.advance(2)
    assert ticks == [2, 1]
    assert expired == []
    assert countdown.running is True

    scheduler.advance(1)
    assert ticks == [2, 1, 0]
    assert expired == [3.0]
    assert countdown.running is False
    assert scheduler.pending() == 0


def test_cancelled_countdown_never_fires() -> None:
    scheduler = ManualScheduler()
    expired: list[bool] = []
    countdown = Countdown(scheduler, 2, on_expire=lambda: expired.append(True))
    countdown.start()
    scheduler.advance(1)
    countdown.cancel()
    scheduler.advance(5)

    assert expired == []
    assert countdown.remaining == 1


def test_zero_second_countdown_expires_without_ticking() -> None:
    scheduler = ManualScheduler()
    ticks: list[int] = []
    expired: list[bool] = []
    Countdown(scheduler, 0, on_tick=ticks.append, on_expire=lambda: expired.append(True)).start()

    scheduler.advance(0)
    assert ticks == []
    assert expired == [True]


def test_negative_budget_is_rejected() -> None:
    with pytest.raises(ValueError):
        Countdown(ManualScheduler(), -1, on_expire=lambda: None)
