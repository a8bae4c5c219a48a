"""Herd-wide reminder lists.

Runs the per-animal predictors over a whole flock and keeps the active
females whose surveillance window opens within the caller's horizon.
Pure filter → map → sort pipelines; no state survives a call.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, NamedTuple

from src.breeding.base import (
    Animal,
    GestationPrediction,
    HeatPrediction,
    ReproductiveStatus,
)
from src.breeding.config_loader import BreedingConfig, get_breeding_config
from src.breeding.gestation_predictor import GestationPredictor
from src.breeding.heat_predictor import HeatPredictor
from src.breeding.status_classifier import StatusClassifier

logger = logging.getLogger("ladoum.breeding.herd")


class UpcomingHeat(NamedTuple):
    animal: Animal
    prediction: HeatPrediction


class UpcomingBirth(NamedTuple):
    animal: Animal
    prediction: GestationPrediction


@dataclass(frozen=True)
class CalendarEntry:
    """One female under heat watch on a calendar day.

    Attributes:
        animal:     The female.
        prediction: Her heat forecast.
        is_peak:    True on the predicted heat date itself.
    """

    animal: Animal
    prediction: HeatPrediction
    is_peak: bool


@dataclass(frozen=True)
class CalendarDay:
    day: date
    entries: tuple[CalendarEntry, ...] = ()


class HerdAggregator:
    """Build the upcoming-heat and upcoming-lambing lists for a flock.

    Usage::

        herd = HerdAggregator(config)
        for animal, prediction in herd.upcoming_heats(animals, now=today, horizon_days=7):
            print(animal.name, prediction.next_heat_date)
    """

    def __init__(self, config: BreedingConfig | None = None) -> None:
        self._config = config or get_breeding_config()
        self._heats = HeatPredictor(self._config)
        self._births = GestationPredictor(self._config)
        self._classifier = StatusClassifier(self._config)

    def upcoming_heats(
        self,
        animals: Iterable[Animal],
        now: date,
        horizon_days: int | None = None,
    ) -> list[UpcomingHeat]:
        """Active females whose heat watch opens within ``horizon_days``.

        A female is kept when her window starts on or before ``now +
        horizon_days`` and her predicted heat is not in the past.  Soonest
        heat first; ties keep the input order.
        """
        if horizon_days is None:
            horizon_days = self._config.herd.upcoming_heats_horizon_days
        horizon_end = now + timedelta(days=horizon_days)

        results = []
        for animal in _breeding_females(animals):
            prediction = self._heats.predict_next_heat(animal, now)
            if prediction is None:
                continue
            if prediction.window_start <= horizon_end and prediction.next_heat_date >= now:
                results.append(UpcomingHeat(animal, prediction))

        results.sort(key=lambda item: item.prediction.next_heat_date)
        logger.debug("%d heat(s) expected within %d days of %s", len(results), horizon_days, now)
        return results

    def upcoming_births(
        self,
        animals: Iterable[Animal],
        now: date,
        horizon_days: int | None = None,
    ) -> list[UpcomingBirth]:
        """Pregnant active females whose lambing watch opens within ``horizon_days``."""
        if horizon_days is None:
            horizon_days = self._config.herd.upcoming_births_horizon_days
        horizon_end = now + timedelta(days=horizon_days)

        results = []
        for animal in _breeding_females(animals):
            prediction = self._births.predict_birth_date(animal, now)
            if prediction is None:
                continue
            if prediction.window_start <= horizon_end and prediction.expected_birth_date >= now:
                results.append(UpcomingBirth(animal, prediction))

        results.sort(key=lambda item: item.prediction.expected_birth_date)
        logger.debug("%d lambing(s) expected within %d days of %s", len(results), horizon_days, now)
        return results

    def heat_calendar(
        self,
        animals: Iterable[Animal],
        start: date,
        end: date,
        now: date,
    ) -> list[CalendarDay]:
        """Lay the flock's heat watch windows out day by day.

        Each active female is forecast once as of ``now``; she appears on
        every day from ``start`` to ``end`` (inclusive) covered by her
        surveillance window, flagged as the peak on the predicted date.

        Args:
            animals: The flock.
            start:   First calendar day.
            end:     Last calendar day.
            now:     Reference date for the forecasts.

        Returns:
            One CalendarDay per day in the range; empty if ``end < start``.
        """
        forecasts = [
            (animal, prediction)
            for animal in _breeding_females(animals)
            if (prediction := self._heats.predict_next_heat(animal, now)) is not None
        ]

        days = []
        for offset in range((end - start).days + 1):
            day = start + timedelta(days=offset)
            entries = tuple(
                CalendarEntry(animal, prediction, is_peak=day == prediction.next_heat_date)
                for animal, prediction in forecasts
                if prediction.window_start <= day <= prediction.window_end
            )
            days.append(CalendarDay(day, entries))
        return days

    def status_census(self, animals: Iterable[Animal], now: date) -> dict[ReproductiveStatus, int]:
        """Count active females by reproductive status; every status is present."""
        counts = Counter(
            self._classifier.status_of(animal, now) for animal in _breeding_females(animals)
        )
        return {status: counts.get(status, 0) for status in ReproductiveStatus}


def _breeding_females(animals: Iterable[Animal]) -> list[Animal]:
    return [animal for animal in animals if animal.is_breeding_female]
