import pytest

from game_config import GameConfig
from round_controller import GameState, RoundController
from round_timers import ManualTimerScheduler
from seeded_random import DEFAULT_TEST_SEED, SeededRandom


@pytest.fixture
def game_config():
    return GameConfig()


@pytest.fixture
def rng():
    return SeededRandom(DEFAULT_TEST_SEED)


@pytest.fixture
def scheduler():
    return ManualTimerScheduler()


@pytest.fixture
def make_controller(game_config, scheduler):
    """
    Builds a RoundController on the manual clock.
    Keyword arguments override the constructor defaults (seed, config, beat_sync, canvas size).
    """
    def factory(seed=DEFAULT_TEST_SEED, **kwargs):
        kwargs.setdefault("config", game_config)
        kwargs.setdefault("canvas_width", 1920.0)
        kwargs.setdefault("canvas_height", 1080.0)
        return RoundController(rng=SeededRandom(seed), scheduler=scheduler, **kwargs)

    return factory


@pytest.fixture
def replay():
    """
    Feeds one input per target at the target position shifted by offset_px,
    reproducing the target rhythm on a clock starting at clock_origin_ms.
    """
    def feed(controller, offset_px=0.0, clock_origin_ms=10_000.0):
        for target in controller.sequence():
            controller.on_interaction_start(target.x + offset_px, target.y, clock_origin_ms + target.time_ms)
            controller.on_interaction_end()

    return feed


@pytest.fixture
def run_to_player_turn(scheduler):
    def run(controller):
        scheduler.run_until_idle()
        assert controller.state() == GameState.PLAYER_TURN

    return run
