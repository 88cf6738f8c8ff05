# -*- coding: utf-8 -*-
########################
# sequence_player.py
########################
# Purpose:
# - Drive the playback phase of a round: wait for the beat signal, then present each
#   target at its scheduled offset and report completion.
#
# Design notes:
# - No Qt usage. Timers come from an injected TimerScheduler.
# - play() is cancel-then-restart. A second request never leaves duplicate timers behind.
# - Every deferred callback checks the generation it was scheduled under and does nothing
#   once cancel() or a newer play() has moved the generation on.
# - The step delay is the gap to the next target; the last target holds for final_hold_ms
#   before completion is reported.
#
########################
# Interfaces:
# Public types:
# - BeatSync = Callable[[Callable[[], None]], None]
#     Called with a continuation that must be invoked on the next beat.
#
# Public functions:
# - immediate_beat_sync(continuation) -> None
#
# Public classes:
# - class SequencePlayer
#   - __init__(scheduler: TimerScheduler, timing_config: Optional[TimingConfig] = None,
#              beat_sync: Optional[BeatSync] = None)
#   - play(targets, on_step, on_complete) -> int      (generation)
#   - cancel() -> None
#   - is_active() -> bool
#   - generation() -> int
#
# Outputs:
# - PlaybackStep per target to on_step, then on_complete() once.
#
########################

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from game_config import TimingConfig
from round_timers import TimerHandle, TimerScheduler
from sequence_models import PlaybackStep, Target

BeatSync = Callable[[Callable[[], None]], None]


def immediate_beat_sync(continuation: Callable[[], None]) -> None:
    continuation()


class SequencePlayer:
    def __init__(
        self,
        scheduler: TimerScheduler,
        timing_config: Optional[TimingConfig] = None,
        beat_sync: Optional[BeatSync] = None,
    ) -> None:
        self._scheduler = scheduler
        self._timing = timing_config if timing_config is not None else TimingConfig()
        self._beat_sync: BeatSync = beat_sync if beat_sync is not None else immediate_beat_sync
        self._generation = 0
        self._active = False
        self._handle: Optional[TimerHandle] = None
        self._targets: List[Target] = []
        self._on_step: Optional[Callable[[PlaybackStep], None]] = None
        self._on_complete: Optional[Callable[[], None]] = None

    def generation(self) -> int:
        return int(self._generation)

    def is_active(self) -> bool:
        return bool(self._active)

    def set_beat_sync(self, beat_sync: Optional[BeatSync]) -> None:
        self._beat_sync = beat_sync if beat_sync is not None else immediate_beat_sync

    def cancel(self) -> None:
        self._generation += 1
        self._active = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def play(
        self,
        targets: Sequence[Target],
        on_step: Callable[[PlaybackStep], None],
        on_complete: Callable[[], None],
    ) -> int:
        self.cancel()
        generation = self._generation
        self._targets = list(targets)
        self._on_step = on_step
        self._on_complete = on_complete
        self._active = True

        def on_beat() -> None:
            if generation != self._generation:
                return
            self._schedule(float(self._timing.playback_grace_ms), generation, 0)

        self._beat_sync(on_beat)
        return generation

    def _schedule(self, delay_ms: float, generation: int, target_index: int) -> None:
        self._handle = self._scheduler.call_later(delay_ms, lambda: self._present(generation, target_index))

    def _step_delay_ms(self, target_index: int) -> float:
        if target_index < len(self._targets) - 1:
            return float(self._targets[target_index + 1].time_ms) - float(self._targets[target_index].time_ms)
        return self._timing.final_hold_ms()

    def _present(self, generation: int, target_index: int) -> None:
        if generation != self._generation:
            return

        if target_index >= len(self._targets):
            self._active = False
            self._handle = None
            on_complete = self._on_complete
            if on_complete is not None:
                on_complete()
            return

        target = self._targets[target_index]
        delay_ms = self._step_delay_ms(target_index)
        step = PlaybackStep(
            index=int(target.index),
            frequency=float(target.frequency),
            x=float(target.x),
            y=float(target.y),
            delay_ms=float(delay_ms),
            tone_duration_ms=float(self._timing.tone_duration_ms),
        )
        on_step = self._on_step
        if on_step is not None:
            on_step(step)

        # The step callback may have cancelled or restarted playback.
        if generation != self._generation:
            return
        self._schedule(delay_ms, generation, target_index + 1)


def _run_unit_tests() -> None:
    from round_timers import ManualTimerScheduler

    targets = [
        Target(index=0, x=100.0, y=100.0, color="#f87171", frequency=261.63, time_ms=0.0),
        Target(index=1, x=300.0, y=200.0, color="#fb923c", frequency=329.63, time_ms=500.0),
    ]
    scheduler = ManualTimerScheduler()
    player = SequencePlayer(scheduler)
    steps: List[PlaybackStep] = []
    completions: List[bool] = []

    player.play(targets, steps.append, lambda: completions.append(True))
    scheduler.advance(100.0)
    assert [step.index for step in steps] == [0]
    assert steps[0].delay_ms == 500.0
    scheduler.advance(500.0)
    assert [step.index for step in steps] == [0, 1]
    scheduler.advance(600.0)
    assert completions == [True]

    player.play(targets, steps.append, lambda: completions.append(True))
    player.cancel()
    scheduler.run_until_idle()
    assert len(steps) == 2
    assert completions == [True]


if __name__ == "__main__":
    _run_unit_tests()
    print("sequence_player.py: ok")
