# -*- coding: utf-8 -*-
########################
# round_controller.py
########################
# Purpose:
# - Owns the authoritative round state machine:
#   IDLE -> PLAYBACK -> PLAYER_TURN -> CALCULATING -> SCORING -> PLAYBACK (next round) ...
# - Generates sequences, collects player input, scores, and applies the pass/fail policy.
#
# Stable notes:
# - Single owner for round state. Renderer, audio and input drivers only observe events
#   and call the public transition methods.
# - Deterministic behavior on reset and on next round.
#
########################
# Design notes:
# - No Qt usage. qt_bridge.RoundControllerBridge re-emits events as Qt signals.
# - Randomness comes from the injected SeededRandom. Timers come from the injected
#   TimerScheduler. Both can be replaced in tests.
# - Deferred work is guarded by a generation counter: every round start and reset bumps it,
#   and a callback scheduled under an older generation does nothing.
# - Inputs are recorded in arrival order. The scorer relies on that order.
# - An input's position is where it is released. The held input keeps following drags
#   through CALCULATING; scoring releases it if the player is still holding.
# - tone_stopped is emitted once per held input, never without a started tone.
#
########################
# Interfaces:
# Public enums:
# - GameState: IDLE, PLAYBACK, PLAYER_TURN, CALCULATING, SCORING
#
# Public classes:
# - class RoundEvents (event name constants)
# - class RoundController
#   - connect(event_name: str, callback: Callable[..., None]) -> None
#   - state() / round_number() / sequence() / inputs() / score() / last_result() / active_index()
#   - set_canvas_size(width: float, height: float) -> None
#   - start_game() -> None
#   - finish_playback() -> None
#   - on_interaction_start(x, y, timestamp_ms) -> Optional[float]
#   - on_interaction_move(x, y) -> Optional[float]
#   - on_interaction_end(x=None, y=None) -> None
#   - next_round() -> None
#   - reset() -> None
#   - snapshot() -> dict
#
# Inputs:
# - Start / next round / reset commands, raw (x, y, timestamp) interaction triples.
#
# Outputs:
# - RoundEvents callbacks: state changes, playback steps, live tone pitch, round results.
#
########################

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from frequency_mapper import y_to_frequency
from game_config import GameConfig
from round_timers import TimerHandle, TimerScheduler
from scorer import PassThresholds, calculate_score
from seeded_random import SeededRandom
from sequence_generator import generate_round_sequence
from sequence_models import PlaybackStep, PlayerInputEvent, RoundResult, Score, Target
from sequence_player import BeatSync, SequencePlayer

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    IDLE = "IDLE"
    PLAYBACK = "PLAYBACK"
    PLAYER_TURN = "PLAYER_TURN"
    CALCULATING = "CALCULATING"
    SCORING = "SCORING"


class RoundEvents:
    """Namespace for event names accepted by RoundController.connect."""

    STATE_CHANGED = "state_changed"
    PLAYBACK_STEP = "playback_step"
    ACTIVE_INDEX_CHANGED = "active_index_changed"
    ROUND_SCORED = "round_scored"
    TONE_STARTED = "tone_started"
    TONE_UPDATED = "tone_updated"
    TONE_STOPPED = "tone_stopped"

    ALL = (
        STATE_CHANGED,
        PLAYBACK_STEP,
        ACTIVE_INDEX_CHANGED,
        ROUND_SCORED,
        TONE_STARTED,
        TONE_UPDATED,
        TONE_STOPPED,
    )


@dataclass
class RoundContext:
    round_number: int = 1
    sequence: List[Target] = field(default_factory=list)
    inputs: List[PlayerInputEvent] = field(default_factory=list)
    active_index: Optional[int] = None
    # True from interaction start until release; the last input stays editable while held.
    input_held: bool = False
    score: Optional[Score] = None
    result: Optional[RoundResult] = None


class RoundController:
    def __init__(
        self,
        *,
        rng: SeededRandom,
        scheduler: TimerScheduler,
        config: Optional[GameConfig] = None,
        canvas_width: float = 1920.0,
        canvas_height: float = 1080.0,
        beat_sync: Optional[BeatSync] = None,
    ) -> None:
        self._config = config if config is not None else GameConfig()
        self._rng = rng
        self._scheduler = scheduler
        self._player = SequencePlayer(scheduler, self._config.timing, beat_sync)
        self._thresholds = PassThresholds.from_config(self._config.scoring)

        self._canvas_width = float(canvas_width)
        self._canvas_height = float(canvas_height)

        self._state: GameState = GameState.IDLE
        self._context = RoundContext()
        self._generation = 0
        self._calculating_handle: Optional[TimerHandle] = None
        self._listeners: Dict[str, List[Callable[..., None]]] = {name: [] for name in RoundEvents.ALL}

    # Observers

    def connect(self, event_name: str, callback: Callable[..., None]) -> None:
        if event_name not in self._listeners:
            raise ValueError(f"Unknown round event: {event_name}")
        self._listeners[event_name].append(callback)

    def _emit(self, event_name: str, *args: Any) -> None:
        for callback in list(self._listeners[event_name]):
            callback(*args)

    # Queries

    def config(self) -> GameConfig:
        return self._config

    def state(self) -> GameState:
        return self._state

    def round_number(self) -> int:
        return int(self._context.round_number)

    def sequence(self) -> List[Target]:
        return list(self._context.sequence)

    def inputs(self) -> List[PlayerInputEvent]:
        return list(self._context.inputs)

    def inputs_remaining(self) -> int:
        return max(0, len(self._context.sequence) - len(self._context.inputs))

    def active_index(self) -> Optional[int]:
        return self._context.active_index

    def score(self) -> Optional[Score]:
        return self._context.score

    def last_result(self) -> Optional[RoundResult]:
        return self._context.result

    def generation(self) -> int:
        return int(self._generation)

    def canvas_size(self) -> Tuple[float, float]:
        return (self._canvas_width, self._canvas_height)

    def set_canvas_size(self, width: float, height: float) -> None:
        self._canvas_width = float(width)
        self._canvas_height = float(height)

    def snapshot(self) -> Dict[str, Any]:
        score = self._context.score
        result = self._context.result
        return {
            "ok": True,
            "state": self._state.value,
            "round": self.round_number(),
            "sequence_length": len(self._context.sequence),
            "inputs_received": len(self._context.inputs),
            "inputs_remaining": self.inputs_remaining(),
            "active_index": self._context.active_index,
            "score": score.to_dict() if score is not None else None,
            "passed": result.passed if result is not None else None,
        }

    # Transitions

    def _set_state(self, new_state: GameState) -> None:
        if new_state == self._state:
            return
        logger.debug("round %d: %s -> %s", self.round_number(), self._state.value, new_state.value)
        self._state = new_state
        self._emit(RoundEvents.STATE_CHANGED, new_state)

    def _set_active_index(self, index: Optional[int]) -> None:
        if index == self._context.active_index:
            return
        self._context.active_index = index
        self._emit(RoundEvents.ACTIVE_INDEX_CHANGED, index)

    def _cancel_pending(self) -> None:
        self._generation += 1
        self._player.cancel()
        if self._calculating_handle is not None:
            self._calculating_handle.cancel()
            self._calculating_handle = None
        self._release_held_input()

    def _release_held_input(self) -> None:
        if not self._context.input_held:
            return
        self._context.input_held = False
        self._emit(RoundEvents.TONE_STOPPED)

    def start_game(self) -> None:
        self._begin_round(1)

    def _begin_round(self, round_number: int) -> None:
        self._cancel_pending()

        sequence = generate_round_sequence(
            round_number,
            self._canvas_width,
            self._canvas_height,
            self._rng,
            self._config.sequence,
        )
        self._set_active_index(None)
        self._context = RoundContext(round_number=int(round_number), sequence=sequence)
        logger.info("round %d: playing %d targets", round_number, len(sequence))

        self._set_state(GameState.PLAYBACK)
        self._player.play(sequence, self._on_playback_step, self.finish_playback)

    def _on_playback_step(self, step: PlaybackStep) -> None:
        self._set_active_index(int(step.index))
        self._emit(RoundEvents.PLAYBACK_STEP, step)

    def finish_playback(self) -> None:
        if self._state != GameState.PLAYBACK:
            return
        self._player.cancel()
        self._set_active_index(None)
        self._set_state(GameState.PLAYER_TURN)

    def _accepts_new_input(self) -> bool:
        return self._state == GameState.PLAYER_TURN and len(self._context.inputs) < len(self._context.sequence)

    def on_interaction_start(self, x: float, y: float, timestamp_ms: float) -> Optional[float]:
        if not self._accepts_new_input():
            logger.debug("input rejected in state %s", self._state.value)
            return None

        self._context.inputs.append(PlayerInputEvent(x=float(x), y=float(y), time_ms=float(timestamp_ms)))
        self._context.input_held = True
        frequency = y_to_frequency(y, self._canvas_height, self._config.sequence)
        self._emit(RoundEvents.TONE_STARTED, frequency)

        if len(self._context.inputs) >= len(self._context.sequence):
            self._enter_calculating()
        return frequency

    def _accepts_drag(self) -> bool:
        if not self._context.input_held or not self._context.inputs:
            return False
        # The final input fills the sequence while still held; its drag counts until release.
        return self._state in (GameState.PLAYER_TURN, GameState.CALCULATING)

    def on_interaction_move(self, x: float, y: float) -> Optional[float]:
        if not self._accepts_drag():
            return None

        last_event = self._context.inputs[-1]
        self._context.inputs[-1] = PlayerInputEvent(x=float(x), y=float(y), time_ms=float(last_event.time_ms))
        frequency = y_to_frequency(y, self._canvas_height, self._config.sequence)
        self._emit(RoundEvents.TONE_UPDATED, frequency)
        return frequency

    def on_interaction_end(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        if not self._accepts_drag():
            return
        if x is not None and y is not None:
            self.on_interaction_move(x, y)
        self._release_held_input()

    def _enter_calculating(self) -> None:
        self._set_state(GameState.CALCULATING)
        generation = self._generation

        def on_delay_elapsed() -> None:
            if generation != self._generation or self._state != GameState.CALCULATING:
                return
            self._calculating_handle = None
            self._enter_scoring()

        self._calculating_handle = self._scheduler.call_later(
            float(self._config.timing.calculating_delay_ms),
            on_delay_elapsed,
        )

    def _enter_scoring(self) -> None:
        self._release_held_input()
        score = calculate_score(
            self._context.sequence,
            self._context.inputs,
            float(self._config.scoring.max_position_error_px),
            float(self._config.scoring.max_rhythm_error_ms),
        )
        passed = self._thresholds.is_passing(score)
        result = RoundResult(round_number=self.round_number(), score=score, passed=passed)
        self._context.score = score
        self._context.result = result
        logger.info(
            "round %d scored: position=%d rhythm=%d total=%d (%s)",
            result.round_number,
            score.position,
            score.rhythm,
            score.total,
            "pass" if passed else "fail",
        )

        self._set_state(GameState.SCORING)
        self._emit(RoundEvents.ROUND_SCORED, result)

    def next_round(self) -> None:
        if self._state != GameState.SCORING or self._context.score is None:
            return
        next_round_number = self._thresholds.next_round_number(self.round_number(), self._context.score)
        self._begin_round(next_round_number)

    def reset(self) -> None:
        self._cancel_pending()
        self._set_active_index(None)
        self._context = RoundContext()
        self._set_state(GameState.IDLE)
