import pytest

from game_config import TimingConfig
from sequence_models import Target
from sequence_player import SequencePlayer


def _targets(times):
    return [
        Target(index=i, x=100.0 + i * 50.0, y=200.0, color="#f87171", frequency=261.63 + i, time_ms=float(t))
        for i, t in enumerate(times)
    ]


class _Recorder:
    def __init__(self, scheduler):
        self.scheduler = scheduler
        self.steps = []
        self.step_times = []
        self.completions = []

    def on_step(self, step):
        self.steps.append(step)
        self.step_times.append(self.scheduler.now_ms())

    def on_complete(self):
        self.completions.append(self.scheduler.now_ms())


@pytest.fixture
def recorder(scheduler):
    return _Recorder(scheduler)


def test_steps_follow_target_offsets(scheduler, recorder):
    player = SequencePlayer(scheduler)
    player.play(_targets([0, 500, 750]), recorder.on_step, recorder.on_complete)
    assert player.is_active()

    scheduler.run_until_idle()

    assert [step.index for step in recorder.steps] == [0, 1, 2]
    assert recorder.step_times == [100.0, 600.0, 850.0]
    assert [step.delay_ms for step in recorder.steps] == [500.0, 250.0, 600.0]
    assert all(step.tone_duration_ms == 400.0 for step in recorder.steps)
    assert recorder.completions == [1450.0]
    assert not player.is_active()


def test_step_carries_target_geometry(scheduler, recorder):
    targets = _targets([0, 500])
    SequencePlayer(scheduler).play(targets, recorder.on_step, recorder.on_complete)
    scheduler.run_until_idle()
    first = recorder.steps[0]
    assert (first.x, first.y, first.frequency) == (targets[0].x, targets[0].y, targets[0].frequency)


def test_custom_timing(scheduler, recorder):
    timing = TimingConfig(playback_grace_ms=0.0, tone_duration_ms=200.0, final_hold_factor=2.0)
    SequencePlayer(scheduler, timing).play(_targets([0, 250]), recorder.on_step, recorder.on_complete)
    scheduler.run_until_idle()
    assert recorder.step_times == [0.0, 250.0]
    assert recorder.steps[-1].delay_ms == 400.0
    assert recorder.completions == [650.0]


def test_waits_for_the_beat(scheduler, recorder):
    pending = []
    player = SequencePlayer(scheduler, beat_sync=pending.append)
    player.play(_targets([0, 500]), recorder.on_step, recorder.on_complete)

    scheduler.advance(5000.0)
    assert recorder.steps == []

    pending.pop()()
    scheduler.advance(100.0)
    assert [step.index for step in recorder.steps] == [0]
    assert recorder.step_times == [5100.0]


def test_late_beat_after_cancel_is_ignored(scheduler, recorder):
    pending = []
    player = SequencePlayer(scheduler, beat_sync=pending.append)
    player.play(_targets([0]), recorder.on_step, recorder.on_complete)
    player.cancel()
    pending.pop()()
    scheduler.run_until_idle()
    assert recorder.steps == []
    assert recorder.completions == []


def test_cancel_mid_playback_stops_everything(scheduler, recorder):
    player = SequencePlayer(scheduler)
    player.play(_targets([0, 500, 1000]), recorder.on_step, recorder.on_complete)
    scheduler.advance(700.0)
    assert len(recorder.steps) == 2

    player.cancel()
    scheduler.run_until_idle()
    assert len(recorder.steps) == 2
    assert recorder.completions == []
    assert scheduler.pending_count() == 0


def test_restart_leaves_no_duplicate_timers(scheduler, recorder):
    player = SequencePlayer(scheduler)
    targets = _targets([0, 500])
    first_generation = player.play(targets, recorder.on_step, recorder.on_complete)
    scheduler.advance(300.0)
    second_generation = player.play(targets, recorder.on_step, recorder.on_complete)
    assert second_generation > first_generation

    scheduler.run_until_idle()
    assert [step.index for step in recorder.steps] == [0, 0, 1]
    assert len(recorder.completions) == 1


def test_step_callback_may_cancel_playback(scheduler, recorder):
    player = SequencePlayer(scheduler)

    def on_step(step):
        recorder.on_step(step)
        player.cancel()

    player.play(_targets([0, 500]), on_step, recorder.on_complete)
    scheduler.run_until_idle()
    assert len(recorder.steps) == 1
    assert recorder.completions == []


def test_empty_sequence_completes_after_grace(scheduler, recorder):
    SequencePlayer(scheduler).play([], recorder.on_step, recorder.on_complete)
    scheduler.run_until_idle()
    assert recorder.steps == []
    assert recorder.completions == [100.0]
