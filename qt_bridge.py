# -*- coding: utf-8 -*-
########################
# qt_bridge.py
########################
# Purpose:
# - Qt integration for a desktop front end.
# - Supplies QTimer based deferred scheduling to RoundController and re-emits round events
#   as Qt signals for widgets and audio.
#
# Design notes:
# - Round logic must not depend on this module. RoundController stays Qt free.
# - All timers are single shot and owned by the scheduler QObject.
# - A cancelled handle stops its timer; nothing fires afterwards.
#
########################
# Interfaces:
# Public classes:
# - class QtTimerHandle
#   - cancel() -> None
#   - is_active() -> bool
#
# - class QtTimerScheduler(PyQt6.QtCore.QObject)
#   - call_later(delay_ms: float, callback: Callable[[], None]) -> QtTimerHandle
#   - cancel_all() -> None
#   - pending_count() -> int
#
# - class RoundControllerBridge(PyQt6.QtCore.QObject)
#   - Signals:
#     - stateChanged(str)
#     - playbackStep(object)          PlaybackStep
#     - activeIndexChanged(int)       -1 when nothing is active
#     - roundScored(object)           RoundResult
#     - toneStarted(float)
#     - toneUpdated(float)
#     - toneStopped()
#   - controller() -> RoundController
#
# Inputs:
# - RoundController events.
#
# Outputs:
# - Qt signals for UI subscribers.
#
########################

from __future__ import annotations

from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from round_controller import GameState, RoundController, RoundEvents


class QtTimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer
        self._fired = False

    def _mark_fired(self) -> None:
        self._fired = True
        self._release()

    def _release(self) -> None:
        if self._timer is not None:
            self._timer.deleteLater()
            self._timer = None

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._release()

    def is_active(self) -> bool:
        return self._timer is not None and not self._fired


class QtTimerScheduler(QObject):
    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._handles: List[QtTimerHandle] = []

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(round(float(delay_ms)))))
        handle = QtTimerHandle(timer)

        def on_timeout() -> None:
            if not handle.is_active():
                return
            handle._mark_fired()
            self._forget(handle)
            callback()

        timer.timeout.connect(on_timeout)
        self._handles.append(handle)
        timer.start()
        return handle

    def _forget(self, handle: QtTimerHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    def pending_count(self) -> int:
        self._handles = [handle for handle in self._handles if handle.is_active()]
        return len(self._handles)

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()


class RoundControllerBridge(QObject):
    stateChanged = pyqtSignal(str)
    playbackStep = pyqtSignal(object)
    activeIndexChanged = pyqtSignal(int)
    roundScored = pyqtSignal(object)
    toneStarted = pyqtSignal(float)
    toneUpdated = pyqtSignal(float)
    toneStopped = pyqtSignal()

    def __init__(self, controller: RoundController, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        controller.connect(RoundEvents.STATE_CHANGED, self._on_state_changed)
        controller.connect(RoundEvents.PLAYBACK_STEP, self.playbackStep.emit)
        controller.connect(RoundEvents.ACTIVE_INDEX_CHANGED, self._on_active_index_changed)
        controller.connect(RoundEvents.ROUND_SCORED, self.roundScored.emit)
        controller.connect(RoundEvents.TONE_STARTED, self._on_tone_started)
        controller.connect(RoundEvents.TONE_UPDATED, self._on_tone_updated)
        controller.connect(RoundEvents.TONE_STOPPED, self.toneStopped.emit)

    def controller(self) -> RoundController:
        return self._controller

    def _on_state_changed(self, state: GameState) -> None:
        self.stateChanged.emit(str(state.value))

    def _on_active_index_changed(self, index: Optional[int]) -> None:
        self.activeIndexChanged.emit(int(index) if index is not None else -1)

    def _on_tone_started(self, frequency: float) -> None:
        self.toneStarted.emit(float(frequency))

    def _on_tone_updated(self, frequency: float) -> None:
        self.toneUpdated.emit(float(frequency))
