from __future__ import annotations

from datetime import datetime, timezone

import pytest

from proctor_app.core.integrity_monitor import Consequence, IntegrityMonitor, KeyChord, is_devtools_shortcut
from proctor_app.core.models import CheatingAttempt, SignalType


def _monitor() -> IntegrityMonitor:
    monitor = IntegrityMonitor(context=lambda: {"phase": "in_progress"})
    monitor.attach()
    return monitor


def test_tab_switch_warns_then_cancels() -> None:
    monitor = _monitor()

    first = monitor.observe(SignalType.TAB_SWITCH)
    second = monitor.observe(SignalType.TAB_SWITCH)

    assert first.consequence is Consequence.WARN
    assert first.attempt.warning is True
    assert monitor.warning_issued is True
    assert second.consequence is Consequence.CANCEL
    assert second.offense == 2
    assert second.attempt.warning is False


def test_attempt_carries_context_and_metadata() -> None:
    monitor = _monitor()
    outcome = monitor.observe(SignalType.WINDOW_BLUR, {"source": "window"})

    assert outcome.consequence is Consequence.LOG
    assert outcome.attempt.metadata == {"phase": "in_progress", "source": "window"}


def test_right_click_is_suppressed_and_never_escalates() -> None:
    monitor = _monitor()
    outcomes = [monitor.observe(SignalType.RIGHT_CLICK) for _ in range(5)]

    assert all(outcome.suppress for outcome in outcomes)
    assert {outcome.consequence for outcome in outcomes} == {Consequence.LOG}
    assert monitor.offenses(SignalType.RIGHT_CLICK) == 5


@pytest.mark.parametrize(
    "chord",
    [
        KeyChord(key="F12"),
        KeyChord(key="i", ctrl=True, shift=True),
        KeyChord(key="J", meta=True, shift=True),
        KeyChord(key="c", meta=True, alt=True),
        KeyChord(key="u", ctrl=True),
    ],
)
def test_devtools_shortcuts_are_detected(chord: KeyChord) -> None:
    assert is_devtools_shortcut(chord) is True


@pytest.mark.parametrize(
    "chord",
    [KeyChord(key="i"), KeyChord(key="c", ctrl=True), KeyChord(key="u", ctrl=True, shift=True), KeyChord(key="F5")],
)
def test_ordinary_keys_are_ignored(chord: KeyChord) -> None:
    monitor = _monitor()
    outcome = monitor.observe_key(chord)
    assert outcome.recorded is False
    assert outcome.suppress is False


def test_devtools_key_is_recorded_with_chord() -> None:
    outcome = _monitor().observe_key(KeyChord(key="F12"))
    assert outcome.recorded is True
    assert outcome.suppress is True
    assert outcome.attempt.type is SignalType.DEV_TOOLS
    assert outcome.attempt.metadata["key"] == "F12"


def test_detached_monitor_records_nothing() -> None:
    monitor = _monitor()
    monitor.detach()
    outcome = monitor.observe(SignalType.TAB_SWITCH)
    assert outcome.recorded is False
    assert outcome.attempt is None
    assert monitor.offenses(SignalType.TAB_SWITCH) == 0


def test_attach_rebuilds_offenses_from_history() -> None:
    history = [
        CheatingAttempt(
            type=SignalType.TAB_SWITCH,
            timestamp=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
            warning=True,
        )
    ]
    monitor = IntegrityMonitor()
    monitor.attach(history)

    assert monitor.warning_issued is True
    assert monitor.observe(SignalType.TAB_SWITCH).consequence is Consequence.CANCEL
