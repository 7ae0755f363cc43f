from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Callable

from .field import DEFAULT_GROWTH_TIME
from .items import FlameLevel, normalize_flame_level


def _default_flame_bonus() -> dict[FlameLevel, float]:
    return {"low": 0.0, "mid": 0.1, "high": 0.2}


@dataclass(frozen=True)
class GameConfig:
    """Tunable constants for growth, pests, and refining."""

    growth_time: float = DEFAULT_GROWTH_TIME
    pest_check_interval: float = 5.0
    pest_attack_probability: float = 0.01
    refine_time: float = 5.0
    fire_grass_required: int = 2
    base_success_rate: float = 0.5
    proficiency_bonus: float = 0.01
    flame_bonus: dict[FlameLevel, float] = field(default_factory=_default_flame_bonus)
    proficiency_gain: int = 5
    save_path: str = "save.json"
    # Simulated frame length used when the driver advances time (~60 FPS).
    tick_seconds: float = 0.016

    @staticmethod
    def from_json_file(path: str | Path) -> "GameConfig":
        """Load config from a JSON file on disk."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        return GameConfig.from_dict(raw)

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> "GameConfig":
        """Build and validate a config from a decoded JSON dict; missing keys keep defaults."""
        from .validation import validate_game_config

        if not isinstance(raw, dict):
            raise ValueError("game config must be a mapping")
        growth_raw = _section(raw, "growth")
        pests_raw = _section(raw, "pests")
        refining_raw = _section(raw, "refining")
        defaults = GameConfig()

        cfg = GameConfig(
            growth_time=_number(growth_raw, "growth.growth_time", defaults.growth_time),
            pest_check_interval=_number(pests_raw, "pests.check_interval", defaults.pest_check_interval),
            pest_attack_probability=_number(pests_raw, "pests.attack_probability", defaults.pest_attack_probability),
            refine_time=_number(refining_raw, "refining.refine_time", defaults.refine_time),
            fire_grass_required=_number(refining_raw, "refining.fire_grass_required", defaults.fire_grass_required, int),
            base_success_rate=_number(refining_raw, "refining.base_success_rate", defaults.base_success_rate),
            proficiency_bonus=_number(refining_raw, "refining.proficiency_bonus", defaults.proficiency_bonus),
            flame_bonus=_parse_flame_bonus(refining_raw.get("flame_bonus")),
            proficiency_gain=_number(refining_raw, "refining.proficiency_gain", defaults.proficiency_gain, int),
            save_path=_text(raw, "save_path", defaults.save_path),
            tick_seconds=_number(raw, "tick_seconds", defaults.tick_seconds),
        )
        validate_game_config(cfg)
        return cfg


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a nested config section, treating a missing or null one as empty."""
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping")
    return value


def _parse_flame_bonus(raw: Any) -> dict[FlameLevel, float]:
    """Parse a per-flame bonus mapping; unspecified levels keep their default."""
    out = _default_flame_bonus()
    if raw is None:
        return out
    if not isinstance(raw, dict):
        raise ValueError("refining.flame_bonus must be a mapping")
    for key in raw:
        level = normalize_flame_level(key)
        out[level] = _number(raw, f"refining.flame_bonus.{key}", out[level])
    return out


def _number(section: dict[str, Any], name: str, default: Any, cast: Callable[[Any], Any] = float) -> Any:
    """Cast the value named by the last part of dotted `name`; missing or null keeps the default."""
    value = section.get(name.rsplit(".", 1)[-1])
    if value is None:
        return default
    if isinstance(value, (bool, dict, list)):
        raise ValueError(f"{name} must be a number (got {value!r})")
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number (got {value!r})") from exc


def _text(section: dict[str, Any], name: str, default: str) -> str:
    value = section.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string (got {value!r})")
    return value
