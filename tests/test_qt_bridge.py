import pytest
from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from game_config import GameConfig, SequenceConfig, TimingConfig
from qt_bridge import QtTimerScheduler, RoundControllerBridge
from round_controller import GameState, RoundController
from round_timers import TimerScheduler
from seeded_random import SeededRandom


@pytest.fixture(scope="module")
def qt_app():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


def _spin(milliseconds):
    loop = QEventLoop()
    QTimer.singleShot(milliseconds, loop.quit)
    loop.exec()


def test_qt_scheduler_fires_and_cancels(qt_app):
    scheduler = QtTimerScheduler()
    assert isinstance(scheduler, TimerScheduler)
    fired = []

    kept = scheduler.call_later(10.0, lambda: fired.append("kept"))
    dropped = scheduler.call_later(10.0, lambda: fired.append("dropped"))
    dropped.cancel()
    assert scheduler.pending_count() == 1

    _spin(200)
    assert fired == ["kept"]
    assert not kept.is_active()
    assert not dropped.is_active()
    assert scheduler.pending_count() == 0


def test_cancel_all(qt_app):
    scheduler = QtTimerScheduler()
    fired = []
    for _ in range(3):
        scheduler.call_later(5.0, lambda: fired.append(True))
    scheduler.cancel_all()
    _spin(100)
    assert fired == []


def test_bridge_re_emits_controller_events(qt_app, make_controller, scheduler, replay):
    controller = make_controller()
    bridge = RoundControllerBridge(controller)
    assert bridge.controller() is controller

    states = []
    indices = []
    steps = []
    tones = []
    stops = []
    results = []
    bridge.stateChanged.connect(states.append)
    bridge.activeIndexChanged.connect(indices.append)
    bridge.playbackStep.connect(steps.append)
    bridge.toneStarted.connect(tones.append)
    bridge.toneStopped.connect(lambda: stops.append(True))
    bridge.roundScored.connect(results.append)

    controller.start_game()
    scheduler.run_until_idle()
    replay(controller)
    scheduler.run_until_idle()

    assert states == ["PLAYBACK", "PLAYER_TURN", "CALCULATING", "SCORING"]
    assert indices == [0, 1, 2, -1]
    assert [step.index for step in steps] == [0, 1, 2]
    assert len(tones) == 3
    assert len(stops) == 3
    assert results[0].score.total == 100


def test_controller_runs_on_qt_timers(qt_app):
    config = GameConfig(
        sequence=SequenceConfig(rhythm_interval_beats=[0.02]),
        timing=TimingConfig(playback_grace_ms=0.0, final_hold_factor=0.01),
    )
    controller = RoundController(rng=SeededRandom(1), scheduler=QtTimerScheduler(), config=config)
    controller.start_game()
    _spin(500)
    assert controller.state() == GameState.PLAYER_TURN
