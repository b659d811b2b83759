"""Integrity monitoring: classify candidate-page signals and decide consequences.

Every observed signal becomes a ``CheatingAttempt``. Escalation is declared per
signal type as an offense counter with thresholds; by default only tab switches
escalate (warn on the first, cancel on the second). Right-clicks and devtools
shortcuts are audit-only and are suppressed on the page.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any

from proctor_app.core.models import CheatingAttempt, SignalType

logger = logging.getLogger(__name__)


class Consequence(str, Enum):
    LOG = "log"
    WARN = "warn"
    CANCEL = "cancel"


@dataclass(frozen=True, slots=True)
class EscalationRule:
    """Offense numbers (1-based) at which a signal type warns or cancels."""

    warn_at: int | None = None
    cancel_at: int | None = None

    def consequence_for(self, offense: int) -> Consequence:
        if self.cancel_at is not None and offense >= self.cancel_at:
            return Consequence.CANCEL
        if self.warn_at is not None and offense >= self.warn_at:
            return Consequence.WARN
        return Consequence.LOG


DEFAULT_ESCALATION: Mapping[SignalType, EscalationRule] = {
    SignalType.TAB_SWITCH: EscalationRule(warn_at=1, cancel_at=2),
}
SUPPRESSED_SIGNALS = frozenset({SignalType.RIGHT_CLICK, SignalType.DEV_TOOLS})


@dataclass(frozen=True, slots=True)
class KeyChord:
    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False


def is_devtools_shortcut(chord: KeyChord) -> bool:
    """F12, Ctrl/Cmd+Shift+I/C/J, Ctrl/Cmd+U and the macOS Cmd+Alt+I/C/J variants."""
    key = chord.key.upper()
    if key == "F12":
        return True
    command = chord.ctrl or chord.meta
    if command and chord.shift and key in ("I", "C", "J"):
        return True
    if chord.meta and chord.alt and key in ("I", "C", "J"):
        return True
    return command and not chord.shift and key == "U"


@dataclass(frozen=True, slots=True)
class SignalOutcome:
    recorded: bool
    consequence: Consequence
    suppress: bool
    offense: int = 0
    attempt: CheatingAttempt | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IntegrityMonitor:
    """Tracks offenses per signal type while attached to an attempt."""

    def __init__(
        self,
        *,
        context: Callable[[], dict[str, Any]] | None = None,
        rules: Mapping[SignalType, EscalationRule] = DEFAULT_ESCALATION,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._context = context
        self._rules = dict(rules)
        self._now = now
        self._attached = False
        self._offenses: dict[SignalType, int] = {}

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def warning_issued(self) -> bool:
        return any(
            rule.warn_at is not None and self._offenses.get(signal, 0) >= rule.warn_at
            for signal, rule in self._rules.items()
        )

    def offenses(self, signal: SignalType) -> int:
        return self._offenses.get(signal, 0)

    def attach(self, history: Iterable[CheatingAttempt] = ()) -> None:
        """Start observing; offense counters are rebuilt from prior attempts."""
        self._offenses = {}
        for attempt in history:
            self._offenses[attempt.type] = self._offenses.get(attempt.type, 0) + 1
        self._attached = True

    def detach(self) -> None:
        self._attached = False

    def observe(self, signal: SignalType, metadata: dict[str, Any] | None = None) -> SignalOutcome:
        suppress = signal in SUPPRESSED_SIGNALS
        if not self._attached:
            return SignalOutcome(recorded=False, consequence=Consequence.LOG, suppress=suppress)

        offense = self._offenses.get(signal, 0) + 1
        self._offenses[signal] = offense
        rule = self._rules.get(signal)
        consequence = Consequence.LOG if rule is None else rule.consequence_for(offense)

        details = dict(self._context()) if self._context is not None else {}
        details.update(metadata or {})
        attempt = CheatingAttempt(
            type=signal,
            timestamp=self._now(),
            warning=consequence is Consequence.WARN,
            metadata=details,
        )
        logger.debug("Integrity signal %s #%d -> %s", signal.value, offense, consequence.value)
        return SignalOutcome(
            recorded=True,
            consequence=consequence,
            suppress=suppress,
            offense=offense,
            attempt=attempt,
        )

    def observe_key(self, chord: KeyChord) -> SignalOutcome:
        """Record a keydown only when it is a devtools shortcut."""
        if not is_devtools_shortcut(chord):
            return SignalOutcome(recorded=False, consequence=Consequence.LOG, suppress=False)
        return self.observe(
            SignalType.DEV_TOOLS,
            {"key": chord.key, "ctrl": chord.ctrl, "shift": chord.shift, "alt": chord.alt, "meta": chord.meta},
        )
