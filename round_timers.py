# -*- coding: utf-8 -*-
########################
# round_timers.py
########################
# Purpose:
# - Deferred callback scheduling for playback steps and the calculating delay.
# - Defines the scheduler contract and a deterministic virtual-clock implementation.
#
# Design notes:
# - No Qt usage. qt_bridge.QtTimerScheduler implements the same contract with QTimer.
# - Single cooperative timeline: callbacks run on whoever calls advance().
# - Callbacks due at the same time fire in scheduling order.
# - A cancelled handle never fires.
#
########################
# Interfaces:
# Public protocols:
# - TimerHandle: cancel() -> None, is_active() -> bool
# - TimerScheduler: call_later(delay_ms: float, callback: Callable[[], None]) -> TimerHandle
#
# Public classes:
# - class ManualTimerScheduler
#   - now_ms() -> float
#   - call_later(delay_ms, callback) -> ManualTimerHandle
#   - advance(delta_ms: float) -> int          (number of callbacks fired)
#   - run_until_idle(max_callbacks: int = 10000) -> int
#   - pending_count() -> int
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    def cancel(self) -> None: ...
    def is_active(self) -> bool: ...


@runtime_checkable
class TimerScheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass
class ManualTimerHandle:
    due_ms: float
    order: int
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def is_active(self) -> bool:
        return not self.cancelled and not self.fired


class ManualTimerScheduler:
    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._next_order = 0
        self._pending: List[ManualTimerHandle] = []

    def now_ms(self) -> float:
        return float(self._now_ms)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimerHandle:
        handle = ManualTimerHandle(
            due_ms=float(self._now_ms) + max(0.0, float(delay_ms)),
            order=self._next_order,
            callback=callback,
        )
        self._next_order += 1
        self._pending.append(handle)
        return handle

    def pending_count(self) -> int:
        return sum(1 for handle in self._pending if handle.is_active())

    def _pop_next_due(self, until_ms: float) -> Optional[ManualTimerHandle]:
        active = [handle for handle in self._pending if handle.is_active() and handle.due_ms <= until_ms]
        if not active:
            return None
        handle = min(active, key=lambda item: (item.due_ms, item.order))
        self._pending.remove(handle)
        return handle

    def advance(self, delta_ms: float) -> int:
        target_ms = float(self._now_ms) + max(0.0, float(delta_ms))
        fired_count = 0
        while True:
            handle = self._pop_next_due(target_ms)
            if handle is None:
                break
            self._now_ms = max(self._now_ms, handle.due_ms)
            handle.fired = True
            handle.callback()
            fired_count += 1
        self._now_ms = target_ms
        self._pending = [handle for handle in self._pending if handle.is_active()]
        return fired_count

    def run_until_idle(self, max_callbacks: int = 10000) -> int:
        fired_count = 0
        while fired_count < max_callbacks:
            active = [handle for handle in self._pending if handle.is_active()]
            if not active:
                break
            next_due_ms = min(handle.due_ms for handle in active)
            fired_count += self.advance(next_due_ms - self._now_ms)
        return fired_count
