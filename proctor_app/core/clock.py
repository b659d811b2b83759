"""Scheduling primitives for per-second countdowns.

The engine never reads wall-clock time to decide when a countdown expires.
It asks a ``Scheduler`` to call it back once per second, which keeps the
whole engine single-threaded and lets tests drive time explicitly with
``ManualScheduler``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
import heapq
import itertools
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Runs callbacks after a delay on the host event loop."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop (the server's loop)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_s, callback)


@dataclass(order=True, slots=True)
class _ScheduledCall:
    due_s: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler. Callbacks run only when ``advance`` is called."""

    def __init__(self) -> None:
        self._now_s = 0.0
        self._queue: list[_ScheduledCall] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now_s

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        call = _ScheduledCall(self._now_s + max(0.0, delay_s), next(self._counter), callback)
        heapq.heappush(self._queue, call)
        return call

    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing due callbacks in schedule order."""
        target = self._now_s + seconds
        while self._queue and self._queue[0].due_s <= target:
            call = heapq.heappop(self._queue)
            self._now_s = call.due_s
            if not call.cancelled:
                call.callback()
        self._now_s = target


class Countdown:
    """Whole-second countdown that reports each tick and then expires once."""

    def __init__(
        self,
        scheduler: Scheduler,
        seconds: int,
        *,
        on_tick: Callable[[int], None] | None = None,
        on_expire: Callable[[], None],
    ) -> None:
        if seconds < 0:
            raise ValueError("Countdown seconds must be >= 0")
        self._scheduler = scheduler
        self._remaining = int(seconds)
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._handle: TimerHandle | None = None
        self._running = False

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        delay = 1.0 if self._remaining > 0 else 0.0
        self._handle = self._scheduler.call_later(delay, self._tick)

    def cancel(self) -> None:
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if not self._running:
            return
        if self._remaining > 0:
            self._remaining -= 1
            if self._on_tick is not None:
                self._on_tick(self._remaining)
            # on_tick may cancel us (e.g. the session was cancelled meanwhile).
            if not self._running:
                return
        if self._remaining > 0:
            self._handle = self._scheduler.call_later(1.0, self._tick)
            return
        self._running = False
        self._on_expire()
