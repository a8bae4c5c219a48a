"""Next-heat forecasting.

Algorithm:
1. Classify the female and estimate her cycle length.
2. Pick an anchor date from her status:
   - Pregnant:  expected lambing plus the post-partum delay
   - Lactating: last birth plus the post-partum delay, with a longer cycle
   - Resting:   last event plus its recovery period
   - InHeat:    the current heat plus one cycle
   - Available: the last heat projected past today, or a placeholder
3. Step the anchor forward by whole cycles until it is after today.
4. Surround it with a ± surveillance window.
5. Grade confidence by how many heats have been recorded.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from src.breeding.base import (
    Animal,
    Confidence,
    EventType,
    Gender,
    HeatPrediction,
    History,
    ReproductionRecord,
    ReproductiveStatus,
)
from src.breeding.config_loader import BreedingConfig, get_breeding_config
from src.breeding.cycle_length import CycleLengthEstimator, heat_history, round_half_up
from src.breeding.gestation_predictor import pregnancy_anchor
from src.breeding.status_classifier import StatusClassifier

logger = logging.getLogger("ladoum.breeding.heat")


def first_cycle_after(anchor: date, now: date, cycle_days: int) -> date:
    """Advance ``anchor`` by whole cycles until it falls strictly after ``now``.

    Computed in one step rather than by looping, so the cost does not grow
    with the age of the anchor.  ``cycle_days`` below 1 is treated as 1.
    """
    cycle_days = max(cycle_days, 1)
    if anchor > now:
        return anchor
    cycles = (now - anchor).days // cycle_days + 1
    return anchor + timedelta(days=cycles * cycle_days)


class HeatPredictor:
    """Predict a female's next heat and its surveillance window.

    Usage::

        predictor = HeatPredictor(config)
        prediction = predictor.predict_next_heat(animal, now=date(2026, 3, 1))
        if prediction:
            print(prediction.next_heat_date, prediction.confidence)
    """

    def __init__(self, config: BreedingConfig | None = None) -> None:
        self._config = config or get_breeding_config()
        self._classifier = StatusClassifier(self._config)
        self._estimator = CycleLengthEstimator(self._config)

    def predict_next_heat(self, animal: Animal, now: date) -> HeatPrediction | None:
        """Forecast the next heat, or None when it cannot be dated.

        Args:
            animal: The animal to forecast.
            now:    Reference date.

        Returns:
            HeatPrediction with ``next_heat_date`` strictly after ``now``,
            or None for males and for pregnancies with no datable anchor.
        """
        if animal.gender is not Gender.female:
            return None

        records = animal.reproduction_records
        status = self._classifier.classify(records, now)
        cycle_length = self._estimator.average_cycle_length(records)
        heats = heat_history(records)
        history = History.of(records)

        anchored = self._anchor(status, history, heats, cycle_length, now)
        if anchored is None:
            logger.debug("%s: pregnant with no datable mating, no heat forecast", animal.animal_id)
            return None
        anchor, step = anchored

        next_heat = first_cycle_after(anchor, now, step)
        window = timedelta(days=self._config.heat_cycle.surveillance_window_days)

        return HeatPrediction(
            next_heat_date=next_heat,
            window_start=next_heat - window,
            window_end=next_heat + window,
            confidence=self._confidence(len(heats)),
            based_on_cycles=len(heats),
            average_cycle_length=cycle_length,
            reproductive_status=status,
        )

    def _anchor(
        self,
        status: ReproductiveStatus,
        history: History,
        heats: list[ReproductionRecord],
        cycle_length: int,
        now: date,
    ) -> tuple[date, int] | None:
        """Return (anchor date, cycle step) for a status, or None if undatable."""
        hc = self._config.heat_cycle
        pp = self._config.post_partum
        post_partum = timedelta(days=pp.delay_days)

        if status is ReproductiveStatus.pregnant:
            mating = pregnancy_anchor(history)
            if mating is None:
                return None
            expected_birth = mating.date + timedelta(days=self._config.gestation.period_days)
            return expected_birth + post_partum, cycle_length

        if status is ReproductiveStatus.lactating:
            birth = history.latest(EventType.birth)
            if birth is None:
                return now, cycle_length
            nursing_cycle = max(round_half_up(cycle_length * hc.lactation_extension_factor), 1)
            return birth.date + post_partum, nursing_cycle

        if status is ReproductiveStatus.resting:
            last_event = history.latest()
            if last_event is None:
                return now, cycle_length
            rest = pp.delay_days if last_event.type is EventType.birth else pp.abortion_rest_days
            return last_event.date + timedelta(days=rest), cycle_length

        if status is ReproductiveStatus.in_heat:
            if not heats:
                return now + timedelta(days=cycle_length), cycle_length
            return heats[-1].date + timedelta(days=cycle_length), cycle_length

        if heats:
            return first_cycle_after(heats[-1].date, now, cycle_length), cycle_length
        return now + timedelta(days=hc.no_history_offset_days), cycle_length

    def _confidence(self, heat_count: int) -> Confidence:
        thresholds = self._config.confidence
        if heat_count >= thresholds.high_min_heats:
            return Confidence.high
        if heat_count >= thresholds.medium_min_heats:
            return Confidence.medium
        return Confidence.low
