"""Reproductive status inference.

The status is never stored.  It is recomputed from the full event history
on every call, so a newly recorded event changes the answer immediately.

Algorithm:
1. Sort the dated records most recent first.
2. Walk back through history.  Each record either settles the status or
   falls through to the next older record (it is stale, superseded by a
   later event, or inconclusive on its own).
3. The first record that settles the status wins; with none, the female
   is Available.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence, assert_never

from src.breeding.base import (
    Animal,
    EventType,
    Gender,
    History,
    ReproductionRecord,
    ReproductiveStatus,
)
from src.breeding.config_loader import BreedingConfig, get_breeding_config

logger = logging.getLogger("ladoum.breeding.status")


class StatusClassifier:
    """Derive a female's current reproductive status from her records.

    Usage::

        classifier = StatusClassifier(config)
        classifier.classify(animal.reproduction_records, now=date(2026, 3, 1))
        classifier.status_of(animal, now=date(2026, 3, 1))
    """

    def __init__(self, config: BreedingConfig | None = None) -> None:
        self._config = config or get_breeding_config()

    def status_of(self, animal: Animal, now: date) -> ReproductiveStatus:
        """Status of an animal; males are always Available."""
        if animal.gender is not Gender.female:
            return ReproductiveStatus.available
        return self.classify(animal.reproduction_records, now)

    def classify(self, records: Sequence[ReproductionRecord], now: date) -> ReproductiveStatus:
        """Return the status implied by a female's records as of ``now``.

        Args:
            records: Reproduction records in any order.
            now:     Reference date.

        Returns:
            The first conclusive status, scanning from the most recent record.
        """
        history = History.of(records)
        for record in history.records:
            status = self._status_from(record, history, now)
            if status is not None:
                logger.debug(
                    "Status %s settled by %s on %s",
                    status.value,
                    record.type.value,
                    record.date,
                )
                return status
        return ReproductiveStatus.available

    def _status_from(
        self,
        record: ReproductionRecord,
        history: History,
        now: date,
    ) -> ReproductiveStatus | None:
        """Status settled by one record, or None to keep looking further back."""
        hc = self._config.heat_cycle
        pp = self._config.post_partum
        days_since = (now - record.date).days

        match record.type:
            case EventType.heat:
                if days_since <= hc.in_heat_days:
                    return ReproductiveStatus.in_heat
            case EventType.mating:
                if self._still_pregnant(record, history, days_since):
                    return ReproductiveStatus.pregnant
            case EventType.ultrasound:
                # A negative scan alone says nothing about what came before it
                if record.is_negative_ultrasound:
                    return None
                if self._still_pregnant(record, history, days_since):
                    return ReproductiveStatus.pregnant
            case EventType.birth:
                if days_since < pp.lactation_days and not history.weaning_after(record.date):
                    return ReproductiveStatus.lactating
                if days_since < pp.delay_days:
                    return ReproductiveStatus.resting
            case EventType.abortion:
                if days_since < pp.abortion_rest_days:
                    return ReproductiveStatus.resting
            case EventType.lactation:
                if days_since < pp.lactation_days:
                    return ReproductiveStatus.lactating
            case EventType.weaning:
                pass
            case _:
                assert_never(record.type)
        return None

    def _still_pregnant(self, record: ReproductionRecord, history: History, days_since: int) -> bool:
        """A later negative scan, birth or abortion ends the pregnancy, as does age."""
        return (
            days_since < self._config.gestation.active_window_days
            and not history.negative_ultrasound_after(record.date)
            and not history.outcome_after(record.date)
        )
