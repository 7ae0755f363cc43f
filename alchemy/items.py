from __future__ import annotations

from typing import Literal

ItemKind = Literal["fire_grass", "wood_grass", "pill"]
CropKind = Literal["fire_grass", "wood_grass"]
FlameLevel = Literal["low", "mid", "high"]

EMPTY = "empty"
FIRE_GRASS: CropKind = "fire_grass"
WOOD_GRASS: CropKind = "wood_grass"
PILL: ItemKind = "pill"

CROP_KINDS: tuple[CropKind, ...] = (FIRE_GRASS, WOOD_GRASS)
ITEM_KINDS: tuple[ItemKind, ...] = (FIRE_GRASS, WOOD_GRASS, PILL)

# Toggle order for the flame button; wraps back to "low".
FLAME_LEVELS: tuple[FlameLevel, ...] = ("low", "mid", "high")

FIELD_COUNT = 16
GRID_SIZE = 4


def default_inventory() -> dict[str, int]:
    """Return a zeroed inventory covering every item kind."""
    return {kind: 0 for kind in ITEM_KINDS}


def is_crop_kind(raw: object) -> bool:
    """Return True if raw names a plantable crop."""
    return isinstance(raw, str) and raw in CROP_KINDS


def normalize_flame_level(raw: object) -> FlameLevel:
    """Normalize a flame identifier ("High", " mid ") to its canonical value."""
    key = str(raw).strip().lower()
    if key not in FLAME_LEVELS:
        raise ValueError(f"Unknown flame level: {raw}")
    return key  # type: ignore[return-value]


def next_flame_level(level: FlameLevel) -> FlameLevel:
    """Return the level after `level` in the low -> mid -> high -> low cycle."""
    idx = FLAME_LEVELS.index(level)
    return FLAME_LEVELS[(idx + 1) % len(FLAME_LEVELS)]
