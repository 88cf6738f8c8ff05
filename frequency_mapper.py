# -*- coding: utf-8 -*-
########################
# frequency_mapper.py
########################
# Purpose:
# - Linear map between vertical play-area position and pitch.
# - Used to place targets (pitch -> y) and to turn live player input into a tone (y -> pitch).
#
# Design notes:
# - No Qt usage. Pure functions.
# - The usable band is [y_padding, canvas_height - y_padding]. Bottom of the band is the
#   lowest scale frequency, top of the band is the highest.
# - Continuous, never snapped to a scale note.
# - A band of zero or negative height maps everything to the minimum frequency.
#
########################
# Interfaces:
# Public functions:
# - normalized_pitch(frequency: float, sequence_config: Optional[SequenceConfig] = None) -> float
# - normalized_band_position(y: float, canvas_height: float, sequence_config: Optional[SequenceConfig] = None) -> float
# - frequency_to_y(frequency: float, canvas_height: float, sequence_config: Optional[SequenceConfig] = None) -> float
# - y_to_frequency(y: float, canvas_height: float, sequence_config: Optional[SequenceConfig] = None) -> float
#
########################

from __future__ import annotations

from typing import Optional

from game_config import SequenceConfig

_DEFAULT_SEQUENCE_CONFIG = SequenceConfig()


def _config_or_default(sequence_config: Optional[SequenceConfig]) -> SequenceConfig:
    return sequence_config if sequence_config is not None else _DEFAULT_SEQUENCE_CONFIG


def _usable_height(canvas_height: float, sequence_config: SequenceConfig) -> float:
    return float(canvas_height) - float(sequence_config.y_padding) * 2.0


def normalized_pitch(frequency: float, sequence_config: Optional[SequenceConfig] = None) -> float:
    config = _config_or_default(sequence_config)
    min_frequency = config.min_frequency()
    frequency_range = config.max_frequency() - min_frequency
    if frequency_range <= 0.0:
        return 0.5
    return (float(frequency) - min_frequency) / frequency_range


def normalized_band_position(
    y: float,
    canvas_height: float,
    sequence_config: Optional[SequenceConfig] = None,
) -> float:
    config = _config_or_default(sequence_config)
    usable_height = _usable_height(canvas_height, config)
    if usable_height <= 0.0:
        return 0.0

    band_top = float(config.y_padding)
    band_bottom = float(canvas_height) - float(config.y_padding)
    clamped_y = max(band_top, min(band_bottom, float(y)))
    return (band_bottom - clamped_y) / usable_height


def frequency_to_y(
    frequency: float,
    canvas_height: float,
    sequence_config: Optional[SequenceConfig] = None,
) -> float:
    config = _config_or_default(sequence_config)
    band_bottom = float(canvas_height) - float(config.y_padding)
    return band_bottom - normalized_pitch(frequency, config) * _usable_height(canvas_height, config)


def y_to_frequency(
    y: float,
    canvas_height: float,
    sequence_config: Optional[SequenceConfig] = None,
) -> float:
    config = _config_or_default(sequence_config)
    min_frequency = config.min_frequency()
    max_frequency = config.max_frequency()

    if _usable_height(canvas_height, config) <= 0.0:
        return min_frequency

    frequency = min_frequency + (max_frequency - min_frequency) * normalized_band_position(y, canvas_height, config)
    return max(min_frequency, min(max_frequency, frequency))


def _run_unit_tests() -> None:
    config = SequenceConfig()
    canvas_height = 800.0

    # Bottom of the band is the lowest note, top is the highest.
    assert abs(y_to_frequency(700.0, canvas_height, config) - 261.63) < 1e-9
    assert abs(y_to_frequency(100.0, canvas_height, config) - 523.25) < 1e-9
    assert abs(y_to_frequency(5000.0, canvas_height, config) - 261.63) < 1e-9

    for y in (150.0, 333.3, 512.0, 699.0):
        recovered = normalized_pitch(y_to_frequency(y, canvas_height, config), config)
        assert abs(recovered - normalized_band_position(y, canvas_height, config)) < 1e-9

    for frequency in config.scale_frequencies():
        y = frequency_to_y(frequency, canvas_height, config)
        assert abs(y_to_frequency(y, canvas_height, config) - frequency) < 1e-9

    assert y_to_frequency(50.0, 150.0, config) == 261.63


if __name__ == "__main__":
    _run_unit_tests()
    print("frequency_mapper.py: ok")
