# -*- coding: utf-8 -*-
########################
# scorer.py
########################
# Purpose:
# - Dual-axis scoring of a player's replay against the generated sequence.
# - Position: greedy nearest-target matching in input order.
# - Rhythm: intervals from each list's own first element, compared by index.
# - Pass/fail policy that gates round progression.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Inputs are consumed in arrival order and never re-sorted. The matching is greedy,
#   not a globally optimal assignment.
# - Averages divide by the target count, so missing inputs count as zero.
# - Results round half up, independently per axis.
# - Error tolerances must be positive. That is the caller's contract.
#
########################
# Interfaces:
# Public dataclasses:
# - PositionMatch(input_index: int, target_index: int, distance: float)
# - PassThresholds(min_total: int, min_position: int, min_rhythm: int)
#   - is_passing(score: Score) -> bool
#   - next_round_number(current_round: int, score: Score) -> int
#
# Public functions:
# - position_contribution(distance: float, max_position_error_px: float) -> float
# - rhythm_contribution(error_ms: float, max_rhythm_error_ms: float) -> float
# - greedy_position_matches(targets, inputs) -> list[PositionMatch]
# - calculate_score(targets, inputs, max_position_error_px, max_rhythm_error_ms) -> Score
#
# Inputs:
# - list[Target] from sequence_generator, list[PlayerInputEvent] from the controller.
#
# Outputs:
# - Score for display, progression and the leaderboard handoff.
#
########################

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

from game_config import ScoringConfig
from sequence_models import PlayerInputEvent, Score, Target


@dataclass(frozen=True)
class PositionMatch:
    input_index: int
    target_index: int
    distance: float


@dataclass(frozen=True)
class PassThresholds:
    min_total: int = 50
    min_position: int = 30
    min_rhythm: int = 30

    @classmethod
    def from_config(cls, scoring_config: ScoringConfig) -> "PassThresholds":
        return cls(
            min_total=int(scoring_config.min_total),
            min_position=int(scoring_config.min_position),
            min_rhythm=int(scoring_config.min_rhythm),
        )

    def is_passing(self, score: Score) -> bool:
        if score.total < self.min_total:
            return False
        if score.position < self.min_position:
            return False
        if score.rhythm < self.min_rhythm:
            return False
        return True

    def next_round_number(self, current_round: int, score: Score) -> int:
        if self.is_passing(score):
            return int(current_round) + 1
        return 1


def _round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


def position_contribution(distance: float, max_position_error_px: float) -> float:
    return max(0.0, 100.0 * (1.0 - float(distance) / float(max_position_error_px)))


def rhythm_contribution(error_ms: float, max_rhythm_error_ms: float) -> float:
    return max(0.0, 100.0 * (1.0 - abs(float(error_ms)) / float(max_rhythm_error_ms)))


def greedy_position_matches(targets: Sequence[Target], inputs: Sequence[PlayerInputEvent]) -> List[PositionMatch]:
    unmatched_targets = list(targets)
    matches: List[PositionMatch] = []

    for input_index, input_event in enumerate(inputs):
        if not unmatched_targets:
            break

        best_pool_index = -1
        best_distance = math.inf
        for pool_index, target in enumerate(unmatched_targets):
            distance = math.hypot(float(input_event.x) - float(target.x), float(input_event.y) - float(target.y))
            # Strict comparison: the earliest target wins ties.
            if distance < best_distance:
                best_distance = distance
                best_pool_index = pool_index

        matched_target = unmatched_targets.pop(best_pool_index)
        matches.append(
            PositionMatch(input_index=input_index, target_index=int(matched_target.index), distance=float(best_distance))
        )

    return matches


def _sequence_intervals(times_ms: Sequence[float]) -> List[float]:
    first_time = float(times_ms[0])
    return [float(value) - first_time for value in times_ms[1:]]


def calculate_score(
    targets: Sequence[Target],
    inputs: Sequence[PlayerInputEvent],
    max_position_error_px: float,
    max_rhythm_error_ms: float,
) -> Score:
    if not targets or not inputs:
        return Score.zero()

    position_sum = 0.0
    for match in greedy_position_matches(targets, inputs):
        position_sum += position_contribution(match.distance, max_position_error_px)
    average_position = position_sum / len(targets)

    if len(targets) < 2 or len(inputs) < 2:
        # A single-target round cannot fail rhythm.
        return Score(
            position=_round_half_up(average_position),
            rhythm=100,
            total=_round_half_up(average_position),
        )

    target_intervals = _sequence_intervals([target.time_ms for target in targets])
    input_intervals = _sequence_intervals([input_event.time_ms for input_event in inputs])

    rhythm_sum = 0.0
    for target_interval, input_interval in zip(target_intervals, input_intervals):
        rhythm_sum += rhythm_contribution(input_interval - target_interval, max_rhythm_error_ms)
    average_rhythm = rhythm_sum / (len(targets) - 1)

    average_total = (average_position + average_rhythm) / 2.0

    return Score(
        position=_round_half_up(average_position),
        rhythm=_round_half_up(average_rhythm),
        total=_round_half_up(average_total),
    )


def _run_unit_tests() -> None:
    targets = [
        Target(index=0, x=100.0, y=100.0, color="#f87171", frequency=261.63, time_ms=0.0),
        Target(index=1, x=300.0, y=200.0, color="#fb923c", frequency=329.63, time_ms=500.0),
        Target(index=2, x=500.0, y=150.0, color="#fbbf24", frequency=440.00, time_ms=750.0),
    ]
    perfect = [PlayerInputEvent(x=t.x, y=t.y, time_ms=1000.0 + t.time_ms) for t in targets]
    assert calculate_score(targets, perfect, 150.0, 300.0) == Score(position=100, rhythm=100, total=100)

    assert calculate_score([], [], 150.0, 300.0) == Score.zero()
    assert calculate_score(targets, [], 150.0, 300.0) == Score.zero()

    reversed_inputs = list(reversed(perfect))
    assert calculate_score(targets, reversed_inputs, 150.0, 300.0).position == 100

    thresholds = PassThresholds()
    assert thresholds.next_round_number(3, Score(position=85, rhythm=72, total=78)) == 4
    assert thresholds.next_round_number(3, Score(position=20, rhythm=90, total=55)) == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("scorer.py: ok")
