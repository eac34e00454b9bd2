"""Affection tracker — the single bounded score driving endings.

Bands (checked in this fixed order, first match wins):

  0                   depleted   terminal, reported through ``depleted``
  >= perfect (90)     perfect    "Perfect Love"
  >= happy   (70)     happy      "Happy Ending"
  >= neutral (40)     neutral    "Neutral"
  anything else       fading     "Fading Memory"

Every mutation emits ``changed(old, new)``. ``band_crossed(band)`` fires only
when the band of the new value differs from the band of the old one. Reaching
0 fires ``depleted()`` instead of a band notification. Non-positive deltas
are ignored entirely: no mutation, no notification.
"""

from __future__ import annotations

import logging

from memory_lane.config import AffectionThresholds
from memory_lane.events import Signal
from memory_lane.models import Band

logger = logging.getLogger(__name__)

TIER_LABELS: dict[Band, str] = {
    "perfect": "Perfect Love",
    "happy": "Happy Ending",
    "neutral": "Neutral",
    "fading": "Fading Memory",
    "depleted": "Forgotten",
}


class AffectionTracker:
    def __init__(
        self,
        max_affection: int = 100,
        starting_affection: int = 50,
        thresholds: AffectionThresholds | None = None,
    ) -> None:
        if max_affection <= 0:
            raise ValueError(f"max_affection must be positive, got {max_affection}")
        self._max = max_affection
        self._start = _clamp(starting_affection, 0, max_affection)
        self._thresholds = thresholds or AffectionThresholds()
        self._current = self._start

        self.changed = Signal("affection.changed")
        self.band_crossed = Signal("affection.band_crossed")
        self.depleted = Signal("affection.depleted")

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def current(self) -> int:
        return self._current

    @property
    def max_affection(self) -> int:
        return self._max

    @property
    def starting_affection(self) -> int:
        return self._start

    @property
    def percentage(self) -> float:
        return self._current / self._max

    @property
    def is_depleted(self) -> bool:
        return self._current == 0

    @property
    def band(self) -> Band:
        return self.band_for(self._current)

    def band_for(self, value: int) -> Band:
        t = self._thresholds
        if value <= 0:
            return "depleted"
        if value >= t.perfect:
            return "perfect"
        if value >= t.happy:
            return "happy"
        if value >= t.neutral:
            return "neutral"
        return "fading"

    def tier_label(self) -> str:
        return TIER_LABELS[self.band]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, delta: int) -> None:
        if delta <= 0:
            return
        old = self._current
        self._current = min(old + delta, self._max)
        logger.info("Affection +%d: %d -> %d/%d", delta, old, self._current, self._max)
        self._notify(old)

    def subtract(self, delta: int) -> None:
        if delta <= 0:
            return
        old = self._current
        self._current = max(old - delta, 0)
        logger.info("Affection -%d: %d -> %d/%d", delta, old, self._current, self._max)
        self._notify(old)

    def set(self, value: int) -> None:
        """Set an absolute value (clamped). Used when loading a save."""
        old = self._current
        self._current = _clamp(value, 0, self._max)
        logger.info("Affection set: %d -> %d/%d", old, self._current, self._max)
        self._notify(old)

    def reset(self) -> None:
        self.set(self._start)

    def _notify(self, old: int) -> None:
        new = self._current
        self.changed.emit(old, new)
        if new == 0:
            logger.warning("Affection depleted")
            self.depleted.emit()
            return
        new_band = self.band_for(new)
        if new_band != self.band_for(old):
            logger.info("Affection band %s -> %s", self.band_for(old), new_band)
            self.band_crossed.emit(new_band)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))
