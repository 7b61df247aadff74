"""
Opponent personalities - per-game play style parameters.

A personality biases scoring and error rate:
- aggression: chance to switch into the aggress strategy
- risk_tolerance: willingness to attack without an advantage
- focus_level: probability of picking the best option instead of a near miss
- patience: patient opponents take fewer actions per turn
- thinking_scale: multiplier on the nominal thinking delays

Personalities are sampled once per game from a difficulty preset plus a little
jitter, or fully at random for unknown difficulties.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional


@dataclass
class Personality:
    aggression: float
    risk_tolerance: float
    focus_level: float
    patience: bool
    thinking_scale: float = 1.0

    @property
    def style(self) -> str:
        return "patient" if self.patience else "impulsive"


@dataclass
class Memory:
    """What the opponent remembers between its turns."""
    last_attack_origin: Optional[int] = None  # Territory the player last attacked us from
    turns_since_player_attack: int = 0
    turns_played: int = 0


@dataclass(frozen=True)
class DifficultyPreset:
    aggression: float
    risk_tolerance: float
    focus_level: float
    patience_chance: float  # Probability the sampled personality is patient
    thinking_scale: float


DIFFICULTY_PRESETS = {
    "easy": DifficultyPreset(
        aggression=0.2,
        risk_tolerance=0.1,
        focus_level=0.5,
        patience_chance=1.0,
        thinking_scale=1.5,
    ),
    "normal": DifficultyPreset(
        aggression=0.4,
        risk_tolerance=0.35,
        focus_level=0.75,
        patience_chance=0.6,
        thinking_scale=1.0,
    ),
    "hard": DifficultyPreset(
        aggression=0.6,
        risk_tolerance=0.5,
        focus_level=0.9,
        patience_chance=0.0,
        thinking_scale=0.7,
    ),
    "expert": DifficultyPreset(
        aggression=0.75,
        risk_tolerance=0.65,
        focus_level=0.995,
        patience_chance=0.0,
        thinking_scale=0.3,
    ),
}

PRESET_JITTER = 0.1  # Total width of the uniform jitter on aggression and risk


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def create_personality(difficulty: Optional[str], rng: random.Random) -> Personality:
    """Sample a personality for one game."""
    preset = DIFFICULTY_PRESETS.get(difficulty or "")
    if preset:
        return Personality(
            aggression=_clamp(preset.aggression + (rng.random() - 0.5) * PRESET_JITTER),
            risk_tolerance=_clamp(preset.risk_tolerance + (rng.random() - 0.5) * PRESET_JITTER),
            focus_level=preset.focus_level,
            patience=rng.random() < preset.patience_chance,
            thinking_scale=preset.thinking_scale,
        )

    # Fallback to random personality
    return Personality(
        aggression=0.3 + rng.random() * 0.5,
        risk_tolerance=0.2 + rng.random() * 0.5,
        patience=rng.random() > 0.4,
        focus_level=0.7 + rng.random() * 0.25,
        thinking_scale=1.0,
    )
