from __future__ import annotations

import math

from alchemy.config import GameConfig


class ValidationError(ValueError):
    """Raised when input data is logically invalid."""


def validate_game_config(cfg: GameConfig) -> None:
    """Validate configuration invariants for JSON and programmatic configs."""
    _ensure_positive(cfg.growth_time, "growth.growth_time")
    _ensure_positive(cfg.pest_check_interval, "pests.check_interval")
    _ensure_positive(cfg.refine_time, "refining.refine_time")
    _ensure_positive(cfg.tick_seconds, "tick_seconds")
    _ensure_probability(cfg.pest_attack_probability, "pests.attack_probability")
    _ensure_probability(cfg.base_success_rate, "refining.base_success_rate")

    if cfg.fire_grass_required < 1:
        raise ValidationError(
            f"refining.fire_grass_required must be >= 1 (got {cfg.fire_grass_required})"
        )
    if cfg.proficiency_gain < 0:
        raise ValidationError(f"refining.proficiency_gain must be >= 0 (got {cfg.proficiency_gain})")
    if cfg.proficiency_bonus < 0:
        raise ValidationError(f"refining.proficiency_bonus must be >= 0 (got {cfg.proficiency_bonus})")
    for level, bonus in cfg.flame_bonus.items():
        if bonus < 0:
            raise ValidationError(f"refining.flame_bonus.{level} must be >= 0 (got {bonus})")
    if not cfg.save_path:
        raise ValidationError("save_path must not be empty")


def _ensure_positive(value: float, name: str) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{name} must be > 0 (got {value})")


def _ensure_probability(value: float, name: str) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValidationError(f"{name} must be between 0 and 1 (got {value})")
