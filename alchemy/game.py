from __future__ import annotations

import logging
import random
from types import MappingProxyType
from typing import Mapping, Sequence

from alchemy.config import GameConfig
from alchemy.field import Field
from alchemy.items import (
    FIELD_COUNT,
    FIRE_GRASS,
    PILL,
    FlameLevel,
    default_inventory,
    is_crop_kind,
    next_flame_level,
    normalize_flame_level,
)

logger = logging.getLogger(__name__)


class GameState:
    """Garden, inventory and refining furnace for one player.

    The state is advanced by a driver calling `update(dt)` once per tick with
    the real elapsed seconds. Player actions return False/None when rejected
    and never raise.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        fields: Sequence[Field] | None = None,
        inventory: Mapping[str, int] | None = None,
        proficiency: int = 0,
        flame_level: FlameLevel = "low",
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        if fields is None:
            fields = [Field() for _ in range(FIELD_COUNT)]
        if len(fields) != FIELD_COUNT:
            raise ValueError(f"expected {FIELD_COUNT} fields (got {len(fields)})")
        self._fields: tuple[Field, ...] = tuple(fields)
        self._inventory = default_inventory()
        if inventory:
            self._inventory.update(inventory)
        self.proficiency = proficiency
        self._flame_level = normalize_flame_level(flame_level)
        self.refining = False
        self.refine_time_remaining = 0.0
        self.pest_timer = 0.0
        self.last_refine_success: bool | None = None

    @property
    def fields(self) -> tuple[Field, ...]:
        return self._fields

    @property
    def inventory(self) -> Mapping[str, int]:
        """Read-only view of item counts."""
        return MappingProxyType(self._inventory)

    @property
    def flame_level(self) -> FlameLevel:
        return self._flame_level

    def update(self, dt: float) -> None:
        """Advance growth, the refining timer, and the pest check by dt seconds."""
        if dt < 0:
            raise ValueError(f"dt must be >= 0 (got {dt})")
        for field in self._fields:
            field.update(dt)

        if self.refining:
            self.refine_time_remaining -= dt
            if self.refine_time_remaining <= 0:
                self.refining = False
                self.refine_time_remaining = 0.0
                success = self._refine()
                self.last_refine_success = success
                logger.info("refining %s", "succeeded" if success else "failed")

        self.pest_timer += dt
        if self.pest_timer >= self.config.pest_check_interval:
            if self.rng.random() < self.config.pest_attack_probability:
                self._pest_attack()
            self.pest_timer = 0.0

    def _pest_attack(self) -> None:
        lost = 0
        for field in self._fields:
            # Fully grown crops are safe.
            if not field.is_empty() and not field.is_ready():
                field.clear()
                lost += 1
        logger.info("pest attack: %d growing crop(s) lost", lost)

    def _valid_index(self, index: int) -> bool:
        return 0 <= index < len(self._fields)

    def plant(self, index: int, crop_type: str) -> bool:
        if not self._valid_index(index) or not is_crop_kind(crop_type):
            logger.debug("cannot plant %r at %d", crop_type, index)
            return False
        field = self._fields[index]
        if not field.is_empty():
            logger.debug("field %d is occupied by %s", index, field.crop_type)
            return False
        field.plant(crop_type, self.config.growth_time)
        return True

    def harvest(self, index: int) -> str | None:
        if not self._valid_index(index) or not self._fields[index].is_ready():
            logger.debug("nothing to harvest at %d", index)
            return None
        crop_type = self._fields[index].harvest()
        if crop_type is not None:
            self._inventory[crop_type] = self._inventory.get(crop_type, 0) + 1
        return crop_type

    def click(self, index: int) -> str:
        """Plant fire grass on an empty field, otherwise try to harvest it."""
        if self.plant(index, FIRE_GRASS):
            return "planted"
        if self.harvest(index) is not None:
            return "harvested"
        return "busy"

    def start_refining(self) -> bool:
        if self.refining or self._inventory[FIRE_GRASS] < self.config.fire_grass_required:
            logger.info("not enough %s or already refining", FIRE_GRASS)
            return False
        self.refining = True
        self.refine_time_remaining = self.config.refine_time
        self.last_refine_success = None
        logger.info("started refining with %s flame", self._flame_level)
        return True

    def set_flame_level(self, level: FlameLevel) -> None:
        self._flame_level = normalize_flame_level(level)
        logger.info("flame set to %s", self._flame_level)

    def cycle_flame(self) -> FlameLevel:
        """Step the flame low -> mid -> high -> low and return the new level."""
        self.set_flame_level(next_flame_level(self._flame_level))
        return self._flame_level

    def success_rate(self) -> float:
        """Return the current refining success chance.

        Not clamped: at high proficiency and flame it exceeds 1.0 and every
        refine succeeds.
        """
        return (
            self.config.base_success_rate
            + self.proficiency * self.config.proficiency_bonus
            + self.config.flame_bonus.get(self._flame_level, 0.0)
        )

    def _refine(self) -> bool:
        required = self.config.fire_grass_required
        if self._inventory[FIRE_GRASS] < required:
            return False
        self._inventory[FIRE_GRASS] -= required
        if self.rng.random() < self.success_rate():
            self._inventory[PILL] += 1
            self.proficiency += self.config.proficiency_gain
            return True
        return False
