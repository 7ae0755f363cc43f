from __future__ import annotations

import logging

from alchemy.items import EMPTY

logger = logging.getLogger(__name__)

DEFAULT_GROWTH_TIME = 10.0


class Field:
    """One plant slot of the 4x4 garden.

    Growth is tracked by accumulating the `dt` handed to `update`, so a
    variable frame rate does not change how long a crop takes in real time.
    """

    def __init__(self) -> None:
        self._crop_type = EMPTY
        self.growth_time = DEFAULT_GROWTH_TIME
        self.elapsed = 0.0
        self._ready = False

    @classmethod
    def ready_crop(cls, crop_type: str, growth_time: float = DEFAULT_GROWTH_TIME) -> "Field":
        """Build a field already holding a harvestable crop."""
        field = cls()
        field._crop_type = crop_type
        field.growth_time = growth_time
        field.elapsed = growth_time
        field._ready = True
        return field

    @classmethod
    def growing_crop(cls, crop_type: str, growth_time: float = DEFAULT_GROWTH_TIME) -> "Field":
        """Build a freshly sown field without logging a planting."""
        field = cls()
        field._sow(crop_type, growth_time)
        return field

    @property
    def crop_type(self) -> str:
        return self._crop_type

    def is_empty(self) -> bool:
        return self._crop_type == EMPTY

    def is_ready(self) -> bool:
        return self._ready

    @property
    def progress(self) -> float:
        """Return the completed fraction of growth in [0, 1]."""
        if self.is_empty():
            return 0.0
        if self._ready or self.growth_time <= 0:
            return 1.0
        return min(self.elapsed / self.growth_time, 1.0)

    def plant(self, crop_type: str, growth_time: float = DEFAULT_GROWTH_TIME) -> None:
        """Sow `crop_type`, discarding whatever the field held."""
        self._sow(crop_type, growth_time)
        logger.info("planted %s", crop_type)

    def _sow(self, crop_type: str, growth_time: float) -> None:
        self._crop_type = crop_type
        self.growth_time = growth_time
        self.elapsed = 0.0
        self._ready = False

    def clear(self) -> None:
        """Reset the field to empty without yielding anything."""
        self._crop_type = EMPTY
        self.elapsed = 0.0
        self._ready = False

    def update(self, dt: float) -> None:
        if self.is_empty() or self._ready:
            return
        self.elapsed += dt
        if self.elapsed >= self.growth_time:
            self._ready = True
            logger.info("field is ready for harvest: %s", self._crop_type)

    def harvest(self) -> str | None:
        """Return the crop and empty the field, or None if nothing is ready."""
        if not self._ready or self.is_empty():
            return None
        crop_type = self._crop_type
        self.clear()
        logger.info("harvested %s", crop_type)
        return crop_type

    def __repr__(self) -> str:
        return f"Field(crop_type={self._crop_type!r}, elapsed={self.elapsed:.2f}, ready={self._ready})"
