"""Lambing date forecasting.

Re-derives its own pregnancy anchor instead of trusting the status
classifier, so it can run on its own for the lambing calendar.  The two
agree in practice: both track a pregnancy for the same number of days
after the anchor and both drop it on a later negative scan, birth or
abortion.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from src.breeding.base import (
    Animal,
    Confidence,
    EventType,
    GestationPrediction,
    Gender,
    History,
    ReproductionRecord,
    UltrasoundResult,
)
from src.breeding.config_loader import BreedingConfig, get_breeding_config

logger = logging.getLogger("ladoum.breeding.gestation")


def pregnancy_anchor(history: History) -> ReproductionRecord | None:
    """Return the event a presumed pregnancy is dated from.

    The anchor is the most recent Mating or non-negative Ultrasound, the
    same event the status classifier starts its pregnancy clock from.
    Negative scans are never anchors.

    Args:
        history: The animal's dated records, most recent first.

    Returns:
        The anchoring record, or None if nothing could date a pregnancy.
    """
    return next(
        (r for r in history.records if r.type is EventType.mating or r.is_positive_ultrasound),
        None,
    )


class GestationPredictor:
    """Predict the lambing date of a pregnant female.

    Usage::

        predictor = GestationPredictor(config)
        prediction = predictor.predict_birth_date(animal, now=date(2024, 3, 1))
        if prediction:
            print(prediction.expected_birth_date, prediction.days_remaining)
    """

    def __init__(self, config: BreedingConfig | None = None) -> None:
        self._config = config or get_breeding_config()

    def predict_birth_date(self, animal: Animal, now: date) -> GestationPrediction | None:
        """Forecast the lambing date, or None when there is nothing to predict.

        None covers: a male, an empty history, no mating or confirming scan,
        a negative scan after the anchor, a birth or abortion after it, and
        an anchor so old that the lambing was presumably never recorded.

        Args:
            animal: The animal to forecast.
            now:    Reference date.

        Returns:
            GestationPrediction or None.
        """
        if animal.gender is not Gender.female or not animal.reproduction_records:
            return None

        gestation = self._config.gestation
        history = History.of(animal.reproduction_records)

        anchor = pregnancy_anchor(history)
        if anchor is None:
            return None

        if history.negative_ultrasound_after(anchor.date):
            logger.debug("%s: pregnancy from %s ruled out by scan", animal.animal_id, anchor.date)
            return None
        if history.outcome_after(anchor.date):
            logger.debug("%s: pregnancy from %s already resolved", animal.animal_id, anchor.date)
            return None

        days_since = (now - anchor.date).days
        if days_since >= gestation.active_window_days:
            logger.debug(
                "%s: anchor %s is %d days old, treating as stale",
                animal.animal_id,
                anchor.date,
                days_since,
            )
            return None

        expected = anchor.date + timedelta(days=gestation.period_days)
        window = timedelta(days=gestation.surveillance_window_days)

        if self._confirmed(anchor, history):
            confidence = Confidence.high
        elif days_since < gestation.early_pregnancy_days:
            confidence = Confidence.low
        else:
            confidence = Confidence.medium

        return GestationPrediction(
            expected_birth_date=expected,
            window_start=expected - window,
            window_end=expected + window,
            days_remaining=(expected - now).days,
            mating_date=anchor.date,
            confidence=confidence,
        )

    @staticmethod
    def _confirmed(anchor: ReproductionRecord, history: History) -> bool:
        """A pregnancy is confirmed by a Positive scan on or after its anchor."""
        if anchor.ultrasound_result is UltrasoundResult.positive:
            return True
        return history.positive_ultrasound_after(anchor.date)
