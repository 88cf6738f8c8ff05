"""
game_config.py

Typed configuration loading and validation for Memorhythm.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included, so a missing file is fine)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If MEMORHYTHM_CONFIG_PATH is set, that file is used and must exist.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./memorhythm_config.json (current working directory)
  2) <user config dir>/Memorhythm/memorhythm_config.json
- If none exists, the built-in defaults are used.

Example config file (memorhythm_config.json)
{
  "sequence": {
    "bpm": 120,
    "rhythm_interval_beats": [1.0, 1.0, 0.5]
  },
  "scoring": {
    "max_position_error_px": 150,
    "max_rhythm_error_ms": 300
  },
  "timing": {
    "calculating_delay_ms": 1500
  },
  "server": {
    "host": "127.0.0.1",
    "port": 5178
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator


# C major pentatonic, C4 to C5.
DEFAULT_MUSICAL_SCALE: Dict[str, float] = {
    "C4": 261.63,
    "D4": 293.66,
    "E4": 329.63,
    "G4": 392.00,
    "A4": 440.00,
    "C5": 523.25,
}

DEFAULT_PALETTE: List[str] = [
    "#f87171",  # Red
    "#fb923c",  # Orange
    "#fbbf24",  # Amber
    "#a3e635",  # Lime
    "#4ade80",  # Green
    "#2dd4bf",  # Teal
    "#22d3ee",  # Cyan
    "#60a5fa",  # Blue
    "#a78bfa",  # Violet
    "#f472b6",  # Pink
]


class SequenceConfig(BaseModel):
    musical_scale: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_MUSICAL_SCALE),
        description="Ordered note name to frequency (Hz) mapping targets are drawn from.",
    )
    palette: List[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE), description="Target colors, cycled by index.")
    bpm: float = Field(default=120.0, gt=0, description="Tempo the rhythm intervals are derived from.")
    rhythm_interval_beats: List[float] = Field(
        default_factory=lambda: [1.0, 1.0, 0.5],
        description="Candidate gaps between targets in beats. Repeat a value to weight it.",
    )
    x_padding: float = Field(default=100.0, ge=0)
    y_padding: float = Field(default=100.0, ge=0)
    circle_radius: float = Field(default=30.0, ge=0)
    x_jitter_fraction: float = Field(default=0.15, ge=0, description="Horizontal jitter span as a fraction of the step.")
    y_jitter_px: float = Field(default=50.0, ge=0, description="Vertical jitter span in pixels.")

    @field_validator("musical_scale")
    @classmethod
    def validate_musical_scale(cls, value: Dict[str, float]) -> Dict[str, float]:
        if not value:
            raise ValueError("musical_scale must contain at least one note")
        for note_name, frequency in value.items():
            if float(frequency) <= 0.0:
                raise ValueError(f"musical_scale frequency for {note_name} must be positive")
        return value

    @field_validator("palette")
    @classmethod
    def validate_palette(cls, value: List[str]) -> List[str]:
        cleaned = [str(item).strip() for item in value if str(item).strip()]
        if not cleaned:
            raise ValueError("palette must contain at least one color")
        return cleaned

    @field_validator("rhythm_interval_beats")
    @classmethod
    def validate_rhythm_interval_beats(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("rhythm_interval_beats must contain at least one interval")
        if any(float(item) <= 0.0 for item in value):
            raise ValueError("rhythm_interval_beats must all be positive")
        return value

    def scale_frequencies(self) -> List[float]:
        return [float(frequency) for frequency in self.musical_scale.values()]

    def min_frequency(self) -> float:
        return min(self.scale_frequencies())

    def max_frequency(self) -> float:
        return max(self.scale_frequencies())

    def quarter_note_ms(self) -> float:
        return 60000.0 / float(self.bpm)

    def rhythm_intervals_ms(self) -> List[float]:
        quarter_note_ms = self.quarter_note_ms()
        return [float(beats) * quarter_note_ms for beats in self.rhythm_interval_beats]


class ScoringConfig(BaseModel):
    max_position_error_px: float = Field(default=150.0, gt=0, description="Distance at which a position pair scores 0.")
    max_rhythm_error_ms: float = Field(default=300.0, gt=0, description="Interval error at which a rhythm pair scores 0.")
    min_total: int = Field(default=50, ge=0, le=100)
    min_position: int = Field(default=30, ge=0, le=100)
    min_rhythm: int = Field(default=30, ge=0, le=100)


class TimingConfig(BaseModel):
    calculating_delay_ms: float = Field(default=1500.0, ge=0, description="Suspense delay before scoring.")
    playback_grace_ms: float = Field(default=100.0, ge=0, description="Delay between the beat signal and target 0.")
    tone_duration_ms: float = Field(default=400.0, gt=0)
    final_hold_factor: float = Field(default=1.5, gt=0, description="Last target hold, as a multiple of the tone duration.")

    def final_hold_ms(self) -> float:
        return float(self.tone_duration_ms) * float(self.final_hold_factor)


class ServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1", description="Bind address for the local web server.")
    port: int = Field(default=5178, ge=1, le=65535, description="Port for the local web server.")


class LeaderboardConfig(BaseModel):
    max_entries: int = Field(default=100, ge=1, description="Entries kept per category.")
    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=100, ge=1)


class GameConfig(BaseModel):
    sequence: SequenceConfig = Field(default_factory=SequenceConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    leaderboard: LeaderboardConfig = Field(default_factory=LeaderboardConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("Memorhythm", "Memorhythm"))
    return [
        Path.cwd() / "memorhythm_config.json",
        config_directory / "memorhythm_config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("MEMORHYTHM_CONFIG_PATH", "").strip()
    if explicit_path_text:
        explicit_path = Path(explicit_path_text)
        if not explicit_path.exists():
            raise FileNotFoundError(f"MEMORHYTHM_CONFIG_PATH points to a missing file: {explicit_path}")
        return explicit_path

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - MEMORHYTHM_BPM
    - MEMORHYTHM_MAX_POSITION_ERROR_PX
    - MEMORHYTHM_MAX_RHYTHM_ERROR_MS
    - MEMORHYTHM_CALCULATING_DELAY_MS
    - MEMORHYTHM_WEB_HOST
    - MEMORHYTHM_WEB_PORT
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    sequence_section = ensure_nested(updated_config, "sequence")
    scoring_section = ensure_nested(updated_config, "scoring")
    timing_section = ensure_nested(updated_config, "timing")
    server_section = ensure_nested(updated_config, "server")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    override_float("MEMORHYTHM_BPM", sequence_section, "bpm")
    override_float("MEMORHYTHM_MAX_POSITION_ERROR_PX", scoring_section, "max_position_error_px")
    override_float("MEMORHYTHM_MAX_RHYTHM_ERROR_MS", scoring_section, "max_rhythm_error_ms")
    override_float("MEMORHYTHM_CALCULATING_DELAY_MS", timing_section, "calculating_delay_ms")

    override_string("MEMORHYTHM_WEB_HOST", server_section, "host")
    override_int("MEMORHYTHM_WEB_PORT", server_section, "port")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[GameConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = GameConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "defaults"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[GameConfig, Optional[Path]]:
    return load_config()


def to_json(config: GameConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)
