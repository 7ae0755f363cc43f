from __future__ import annotations

import json
import logging
import math
import random
from pathlib import Path
from typing import Any

from alchemy.config import GameConfig
from alchemy.field import Field
from alchemy.game import GameState
from alchemy.items import FIELD_COUNT, ITEM_KINDS, FlameLevel, default_inventory, is_crop_kind, normalize_flame_level

logger = logging.getLogger(__name__)

JSON_INDENT = 4


def to_document(state: GameState) -> dict[str, Any]:
    """Snapshot a game as a JSON-ready dict.

    Growth progress is not stored: only the `ready` flag survives a reload.
    """
    return {
        "fields": [
            {"type": field.crop_type, "growth_time": field.growth_time, "ready": field.is_ready()}
            for field in state.fields
        ],
        "inventory": dict(state.inventory),
        "proficiency": state.proficiency,
        "flame_type": state.flame_level,
    }


def from_document(
    raw: Any,
    config: GameConfig | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Rebuild a game from a decoded save document.

    Anything missing or malformed falls back to its default; a document that
    is not a mapping at all yields a fresh game.
    """
    if not isinstance(raw, dict):
        logger.warning("save data is not an object; starting a new game")
        return GameState(config=config, rng=rng)
    cfg = config or GameConfig()
    return GameState(
        config=cfg,
        rng=rng,
        fields=_parse_fields(raw.get("fields"), cfg.growth_time),
        inventory=_parse_inventory(raw.get("inventory")),
        proficiency=_parse_proficiency(raw.get("proficiency")),
        flame_level=_parse_flame_level(raw.get("flame_type")),
    )


def save_game(state: GameState, path: str | Path) -> None:
    """Write the game to `path`, replacing any previous save."""
    Path(path).write_text(json.dumps(to_document(state), indent=JSON_INDENT), encoding="utf-8")
    logger.info("saved game to %s", path)


def load_game(
    path: str | Path,
    config: GameConfig | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Load a game from `path`; a missing or unreadable save starts a new game."""
    save_path = Path(path)
    if not save_path.exists():
        logger.info("no save found at %s, creating new game state", save_path)
        return GameState(config=config, rng=rng)
    try:
        raw = json.loads(save_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("could not read save %s (%s); creating new game state", save_path, exc)
        return GameState(config=config, rng=rng)
    state = from_document(raw, config=config, rng=rng)
    logger.info("loaded game: flame=%s, proficiency=%d", state.flame_level, state.proficiency)
    return state


def _parse_fields(raw: Any, default_growth_time: float) -> list[Field]:
    """Parse up to 16 field entries, padding with empty fields."""
    fields: list[Field] = []
    if isinstance(raw, list):
        for entry in raw[:FIELD_COUNT]:
            fields.append(_parse_field(entry, default_growth_time))
    elif raw is not None:
        logger.warning("save fields must be a list; using empty fields")
    while len(fields) < FIELD_COUNT:
        fields.append(Field())
    return fields


def _parse_field(raw: Any, default_growth_time: float) -> Field:
    field = Field()
    if not isinstance(raw, dict):
        return field
    crop_type = raw.get("type")
    if not is_crop_kind(crop_type):
        return field
    growth_time = _parse_float(raw.get("growth_time"), default_growth_time)
    if raw.get("ready") is True:
        return Field.ready_crop(crop_type, growth_time)
    # Elapsed growth is not saved, so a growing crop starts over.
    return Field.growing_crop(crop_type, growth_time)


def _parse_float(raw: Any, default: float) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw) or raw <= 0:
        return default
    return float(raw)


def _parse_count(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        return 0
    return raw


def _parse_inventory(raw: Any) -> dict[str, int]:
    """Parse item counts over the known item kinds; unknown keys are dropped."""
    inventory = default_inventory()
    if not isinstance(raw, dict):
        return inventory
    for kind in ITEM_KINDS:
        inventory[kind] = _parse_count(raw.get(kind))
    return inventory


def _parse_proficiency(raw: Any) -> int:
    return _parse_count(raw)


def _parse_flame_level(raw: Any) -> FlameLevel:
    if raw is None:
        return "low"
    try:
        return normalize_flame_level(raw)
    except ValueError:
        logger.warning("unknown flame type %r in save; using low", raw)
        return "low"
