import pytest

from frequency_mapper import frequency_to_y, normalized_band_position, normalized_pitch, y_to_frequency
from game_config import SequenceConfig

LOW = 261.63
HIGH = 523.25


def test_band_edges_map_to_scale_edges():
    assert y_to_frequency(980.0, 1080.0) == pytest.approx(LOW)
    assert y_to_frequency(100.0, 1080.0) == pytest.approx(HIGH)


def test_outside_band_is_clamped():
    assert y_to_frequency(-500.0, 1080.0) == pytest.approx(HIGH)
    assert y_to_frequency(5000.0, 1080.0) == pytest.approx(LOW)


def test_mapping_is_continuous_not_snapped():
    middle = y_to_frequency(540.0, 1080.0)
    assert middle == pytest.approx((LOW + HIGH) / 2.0)
    assert middle not in SequenceConfig().scale_frequencies()


def test_higher_on_screen_is_higher_pitch():
    frequencies = [y_to_frequency(y, 1080.0) for y in range(100, 981, 40)]
    assert frequencies == sorted(frequencies, reverse=True)


@pytest.mark.parametrize("canvas_height", [200.0, 150.0, 0.0, -10.0])
def test_degenerate_band_returns_minimum(canvas_height):
    assert y_to_frequency(50.0, canvas_height) == LOW


@pytest.mark.parametrize("y", [100.5, 250.0, 333.3, 540.0, 812.25, 979.5])
def test_round_trip_recovers_normalized_position(y):
    frequency = y_to_frequency(y, 1080.0)
    assert normalized_pitch(frequency) == pytest.approx(normalized_band_position(y, 1080.0), abs=1e-12)


def test_forward_map_inverts_for_every_scale_note():
    config = SequenceConfig()
    for frequency in config.scale_frequencies():
        y = frequency_to_y(frequency, 720.0, config)
        assert y_to_frequency(y, 720.0, config) == pytest.approx(frequency)


def test_single_note_scale_maps_to_band_middle():
    config = SequenceConfig(musical_scale={"A4": 440.0})
    assert normalized_pitch(440.0, config) == 0.5
    assert frequency_to_y(440.0, 1000.0, config) == pytest.approx(500.0)
    assert y_to_frequency(123.0, 1000.0, config) == 440.0


def test_custom_padding_moves_the_band():
    config = SequenceConfig(y_padding=0.0)
    assert y_to_frequency(0.0, 500.0, config) == pytest.approx(HIGH)
    assert y_to_frequency(500.0, 500.0, config) == pytest.approx(LOW)
