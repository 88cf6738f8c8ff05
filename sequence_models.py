# -*- coding: utf-8 -*-
########################
# sequence_models.py
########################
# Purpose:
# - Core data models for the round pipeline.
# - Defines targets, player input events, scores, playback steps and round results.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain frozen dataclasses.
# - Times are milliseconds. Coordinates are play-area pixels with y growing downward.
#
########################
# Interfaces:
# Public dataclasses:
# - Target(index: int, x: float, y: float, color: str, frequency: float, time_ms: float)
# - PlayerInputEvent(x: float, y: float, time_ms: float)
# - Score(position: int, rhythm: int, total: int)
# - PlaybackStep(index: int, frequency: float, x: float, y: float, delay_ms: float, tone_duration_ms: float)
# - RoundResult(round_number: int, score: Score, passed: bool)
# - ScoreSubmission(user: str, position: int, rhythm: int, total: int, round: int)
#
# Public functions:
# - sequence_length_for_round(round_number: int) -> int
# - targets_match(first: list[Target], second: list[Target], tolerance: float = 0.001) -> bool
#
# Inputs/Outputs:
# - Exchanged between SequenceGenerator, Scorer, SequencePlayer, RoundController,
#   Leaderboard and the web server.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


class SubmissionError(ValueError):
    pass


@dataclass(frozen=True)
class Target:
    index: int
    x: float
    y: float
    color: str
    frequency: float
    time_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": int(self.index),
            "x": float(self.x),
            "y": float(self.y),
            "color": str(self.color),
            "frequency": float(self.frequency),
            "time_ms": float(self.time_ms),
        }


@dataclass(frozen=True)
class PlayerInputEvent:
    x: float
    y: float
    time_ms: float


@dataclass(frozen=True)
class Score:
    position: int
    rhythm: int
    total: int

    @classmethod
    def zero(cls) -> "Score":
        return cls(position=0, rhythm=0, total=0)

    def to_dict(self) -> Dict[str, int]:
        return {"position": int(self.position), "rhythm": int(self.rhythm), "total": int(self.total)}


@dataclass(frozen=True)
class PlaybackStep:
    index: int
    frequency: float
    x: float
    y: float
    delay_ms: float
    tone_duration_ms: float


@dataclass(frozen=True)
class ScoreSubmission:
    user: str
    position: int
    rhythm: int
    total: int
    round: int

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ScoreSubmission":
        user_value = payload.get("user")
        if not isinstance(user_value, str) or not user_value.strip():
            raise SubmissionError("Invalid user name")

        values: Dict[str, int] = {}
        for key_name in ("position", "rhythm", "total", "round"):
            raw_value = payload.get(key_name)
            # bool is an int subclass; reject it explicitly.
            if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
                raise SubmissionError("Invalid score values")
            values[key_name] = int(round(float(raw_value)))

        return cls(user=user_value.strip(), **values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": str(self.user),
            "position": int(self.position),
            "rhythm": int(self.rhythm),
            "total": int(self.total),
            "round": int(self.round),
        }


@dataclass(frozen=True)
class RoundResult:
    round_number: int
    score: Score
    passed: bool

    def to_submission(self, user: str) -> ScoreSubmission:
        return ScoreSubmission(
            user=str(user),
            position=int(self.score.position),
            rhythm=int(self.score.rhythm),
            total=int(self.score.total),
            round=int(self.round_number),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = self.score.to_dict()
        payload["round"] = int(self.round_number)
        payload["passed"] = bool(self.passed)
        return payload


def sequence_length_for_round(round_number: int) -> int:
    return 2 + max(1, int(round_number))


def targets_match(first: List[Target], second: List[Target], tolerance: float = 0.001) -> bool:
    if len(first) != len(second):
        return False
    for left, right in zip(first, second):
        if abs(float(left.x) - float(right.x)) >= tolerance:
            return False
        if abs(float(left.y) - float(right.y)) >= tolerance:
            return False
        if left.time_ms != right.time_ms:
            return False
        if abs(float(left.frequency) - float(right.frequency)) >= tolerance:
            return False
        if left.color != right.color:
            return False
    return True
