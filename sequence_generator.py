from __future__ import annotations

from typing import List, Optional

from frequency_mapper import frequency_to_y
from game_config import SequenceConfig
from seeded_random import SeededRandom
from sequence_models import Target, sequence_length_for_round


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def generate_sequence(
    count: int,
    canvas_width: float,
    canvas_height: float,
    rng: SeededRandom,
    sequence_config: Optional[SequenceConfig] = None,
) -> List[Target]:
    """Build the ordered targets for one round.

    Targets run left to right across the padded width with a little horizontal
    jitter. Pitch is drawn from the scale and sets the height, higher notes
    nearer the top. Colors cycle through the palette by index. Each target after
    the first lands one randomly chosen rhythm interval after the previous one.

    Draw order per target is fixed (x jitter, pitch, y jitter, interval) so a
    given seed always reproduces the same sequence.
    """
    config = sequence_config if sequence_config is not None else SequenceConfig()
    target_count = int(count)
    width = float(canvas_width)
    height = float(canvas_height)

    scale_frequencies = config.scale_frequencies()
    rhythm_intervals_ms = config.rhythm_intervals_ms()
    palette = list(config.palette)
    radius = float(config.circle_radius)

    usable_width = width - float(config.x_padding) * 2.0
    x_step = usable_width / (target_count - 1) if target_count > 1 else 0.0

    targets: List[Target] = []
    current_time_ms = 0.0

    for target_index in range(target_count):
        if target_count == 1:
            x = width / 2.0
        else:
            x_jitter = rng.centered(x_step * float(config.x_jitter_fraction))
            x = float(config.x_padding) + target_index * x_step + x_jitter

        frequency = rng.choice(scale_frequencies)

        y_jitter = rng.centered(float(config.y_jitter_px))
        y = frequency_to_y(frequency, height, config) + y_jitter

        color = palette[target_index % len(palette)]

        if target_index > 0:
            current_time_ms += rng.choice(rhythm_intervals_ms)

        targets.append(
            Target(
                index=target_index,
                x=_clamp(x, radius, width - radius),
                y=_clamp(y, radius, height - radius),
                color=color,
                frequency=float(frequency),
                time_ms=float(current_time_ms),
            )
        )

    return targets


def generate_round_sequence(
    round_number: int,
    canvas_width: float,
    canvas_height: float,
    rng: SeededRandom,
    sequence_config: Optional[SequenceConfig] = None,
) -> List[Target]:
    return generate_sequence(
        sequence_length_for_round(round_number),
        canvas_width,
        canvas_height,
        rng,
        sequence_config,
    )
