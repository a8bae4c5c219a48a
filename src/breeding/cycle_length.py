"""Personal heat-cycle length estimation.

Ewes cycle every 14–19 days on average, but individual animals are
consistent enough that their own history beats the breed default once two
heats have been recorded a plausible interval apart.  Intervals outside the
plausible range are missed heats (too long) or mis-recorded ones (too short)
and are left out of the average.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from src.breeding.base import EventType, ReproductionRecord
from src.breeding.config_loader import BreedingConfig, get_breeding_config

logger = logging.getLogger("ladoum.breeding.cycle_length")


def round_half_up(value: float) -> int:
    """Round to the nearest whole day, halves going up (17.5 → 18)."""
    return math.floor(value + 0.5)


def heat_history(records: Sequence[ReproductionRecord]) -> list[ReproductionRecord]:
    """Return the dated Heat records, oldest first."""
    heats = [r for r in records if r.type is EventType.heat and r.date is not None]
    return sorted(heats, key=lambda r: r.date)


def heat_intervals(records: Sequence[ReproductionRecord]) -> list[int]:
    """Days between consecutive recorded heats, oldest interval first."""
    heats = heat_history(records)
    return [(later.date - earlier.date).days for earlier, later in zip(heats, heats[1:])]


class CycleLengthEstimator:
    """Estimate an animal's average heat-cycle length from its heat records.

    Usage::

        estimator = CycleLengthEstimator(config)
        estimator.average_cycle_length(animal.reproduction_records)  # 17
    """

    def __init__(self, config: BreedingConfig | None = None) -> None:
        self._config = config or get_breeding_config()

    def plausible_intervals(self, records: Sequence[ReproductionRecord]) -> list[int]:
        hc = self._config.heat_cycle
        return [
            days
            for days in heat_intervals(records)
            if hc.min_plausible_days <= days <= hc.max_plausible_days
        ]

    def average_cycle_length(self, records: Sequence[ReproductionRecord]) -> int:
        """Return the rounded mean of the plausible heat intervals.

        Falls back to the configured default when fewer than
        ``min_valid_intervals`` plausible intervals exist.  Never returns
        less than 1 so callers can step dates by the result safely.

        Args:
            records: The animal's reproduction records, in any order.

        Returns:
            Cycle length in whole days.
        """
        hc = self._config.heat_cycle
        intervals = self.plausible_intervals(records)

        if len(intervals) < hc.min_valid_intervals or not intervals:
            length = hc.default_length_days
        else:
            length = round_half_up(sum(intervals) / len(intervals))

        if length < 1:
            logger.warning("Cycle length %d clamped to 1 day", length)
            length = 1
        return length
