"""Tests for lambing date forecasting."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.breeding.base import (
    Confidence,
    EventType,
    History,
    ReproductiveStatus,
    UltrasoundResult,
)
from src.breeding.config_loader import BreedingConfig
from src.breeding.gestation_predictor import GestationPredictor, pregnancy_anchor
from src.breeding.status_classifier import StatusClassifier
from src.breeding.tests.conftest import (
    NOW,
    birth,
    heat,
    make_female,
    make_male,
    make_record,
    mating,
    scan,
)

MATED = date(2024, 1, 1)


def on(day: date, event_type: EventType, result: UltrasoundResult | None = None):
    return make_record(event_type, day, result)


@pytest.fixture
def predictor(breeding_config: BreedingConfig) -> GestationPredictor:
    return GestationPredictor(breeding_config)


class TestPregnancyAnchor:
    def test_latest_mating(self) -> None:
        history = History.of([mating(200), mating(30)])
        anchor = pregnancy_anchor(history)
        assert anchor is not None
        assert anchor.date == mating(30).date

    def test_later_scan_is_the_anchor(self) -> None:
        history = History.of([mating(60), scan(20)])
        anchor = pregnancy_anchor(history)
        assert anchor is not None
        assert anchor.type is EventType.ultrasound
        assert anchor.date == scan(20).date

    def test_negative_scan_skipped_for_earlier_mating(self) -> None:
        history = History.of([mating(60), scan(20, UltrasoundResult.negative)])
        anchor = pregnancy_anchor(history)
        assert anchor is not None
        assert anchor.type is EventType.mating

    def test_scan_after_birth_starts_new_pregnancy(self) -> None:
        history = History.of([mating(300), birth(150), scan(40)])
        anchor = pregnancy_anchor(history)
        assert anchor is not None
        assert anchor.type is EventType.ultrasound

    def test_negative_scan_is_never_an_anchor(self) -> None:
        history = History.of([scan(10, UltrasoundResult.negative)])
        assert pregnancy_anchor(history) is None

    def test_no_breeding_events(self) -> None:
        assert pregnancy_anchor(History.of([heat(5)])) is None


class TestGestationPredictor:
    def test_mating_sixty_days_ago(self, predictor: GestationPredictor) -> None:
        ewe = make_female(on(MATED, EventType.mating))
        prediction = predictor.predict_birth_date(ewe, date(2024, 3, 1))
        assert prediction is not None
        assert prediction.expected_birth_date == date(2024, 5, 30)
        assert prediction.window_start == date(2024, 5, 25)
        assert prediction.window_end == date(2024, 6, 4)
        assert prediction.days_remaining == 90
        assert prediction.mating_date == MATED
        assert prediction.confidence is Confidence.medium

    def test_early_pregnancy_low_confidence(self, predictor: GestationPredictor) -> None:
        ewe = make_female(on(MATED, EventType.mating))
        prediction = predictor.predict_birth_date(ewe, date(2024, 1, 20))
        assert prediction is not None
        assert prediction.confidence is Confidence.low

    def test_positive_scan_dates_the_pregnancy(self, predictor: GestationPredictor) -> None:
        scanned = date(2024, 2, 15)
        ewe = make_female(
            on(MATED, EventType.mating),
            on(scanned, EventType.ultrasound, UltrasoundResult.positive),
        )
        prediction = predictor.predict_birth_date(ewe, date(2024, 3, 1))
        assert prediction is not None
        assert prediction.mating_date == scanned
        assert prediction.expected_birth_date == date(2024, 7, 14)
        assert prediction.days_remaining == 135
        assert prediction.confidence is Confidence.high

    def test_scan_sixty_days_after_mating(self, predictor: GestationPredictor) -> None:
        scanned = MATED + timedelta(days=60)
        ewe = make_female(
            on(MATED, EventType.mating),
            on(scanned, EventType.ultrasound, UltrasoundResult.positive),
        )
        prediction = predictor.predict_birth_date(ewe, scanned + timedelta(days=10))
        assert prediction is not None
        assert prediction.expected_birth_date == scanned + timedelta(days=150)
        assert prediction.window_start == scanned + timedelta(days=145)

    def test_scan_without_result_is_unconfirmed(self, predictor: GestationPredictor) -> None:
        ewe = make_female(on(MATED, EventType.mating), on(date(2024, 1, 15), EventType.ultrasound))
        prediction = predictor.predict_birth_date(ewe, date(2024, 1, 20))
        assert prediction is not None
        assert prediction.mating_date == date(2024, 1, 15)
        assert prediction.confidence is Confidence.low

    def test_negative_scan_rules_out(self, predictor: GestationPredictor) -> None:
        ewe = make_female(
            on(MATED, EventType.mating),
            on(date(2024, 2, 10), EventType.ultrasound, UltrasoundResult.negative),
        )
        assert predictor.predict_birth_date(ewe, date(2024, 3, 1)) is None

    @pytest.mark.parametrize("outcome", [EventType.birth, EventType.abortion])
    def test_resolved_pregnancy(self, predictor: GestationPredictor, outcome: EventType) -> None:
        ewe = make_female(on(MATED, EventType.mating), on(date(2024, 4, 1), outcome))
        assert predictor.predict_birth_date(ewe, date(2024, 4, 10)) is None

    def test_overdue_within_tolerance(self, predictor: GestationPredictor) -> None:
        ewe = make_female(on(MATED, EventType.mating))
        prediction = predictor.predict_birth_date(ewe, MATED + timedelta(days=164))
        assert prediction is not None
        assert prediction.days_remaining == -14

    def test_stale_after_tolerance(self, predictor: GestationPredictor) -> None:
        ewe = make_female(on(MATED, EventType.mating))
        assert predictor.predict_birth_date(ewe, MATED + timedelta(days=165)) is None

    def test_scan_only_pregnancy(self, predictor: GestationPredictor) -> None:
        scanned = date(2024, 2, 1)
        ewe = make_female(on(scanned, EventType.ultrasound, UltrasoundResult.positive))
        prediction = predictor.predict_birth_date(ewe, date(2024, 3, 1))
        assert prediction is not None
        assert prediction.expected_birth_date == scanned + timedelta(days=150)

    def test_new_mating_after_lambing(self, predictor: GestationPredictor) -> None:
        ewe = make_female(
            on(date(2023, 1, 1), EventType.mating),
            on(date(2023, 6, 1), EventType.birth),
            on(MATED, EventType.mating),
        )
        prediction = predictor.predict_birth_date(ewe, date(2024, 3, 1))
        assert prediction is not None
        assert prediction.mating_date == MATED

    def test_male_has_no_prediction(self, predictor: GestationPredictor) -> None:
        assert predictor.predict_birth_date(make_male(mating(30)), NOW) is None

    def test_no_records(self, predictor: GestationPredictor) -> None:
        assert predictor.predict_birth_date(make_female(), NOW) is None

    def test_heat_only(self, predictor: GestationPredictor) -> None:
        assert predictor.predict_birth_date(make_female(heat(5)), NOW) is None

    def test_window_is_ten_days_centered(self, predictor: GestationPredictor) -> None:
        prediction = predictor.predict_birth_date(make_female(mating(100)), NOW)
        assert prediction is not None
        assert (prediction.window_end - prediction.window_start).days == 10
        assert prediction.expected_birth_date - prediction.window_start == timedelta(days=5)


class TestAgreementWithClassifier:
    @pytest.mark.parametrize("n", [0, 44, 45, 150, 164, 165, 166, 300])
    def test_pregnancy_flips_together(self, breeding_config: BreedingConfig, n: int) -> None:
        ewe = make_female(mating(n))
        status = StatusClassifier(breeding_config).status_of(ewe, NOW)
        prediction = GestationPredictor(breeding_config).predict_birth_date(ewe, NOW)
        assert (status is ReproductiveStatus.pregnant) == (prediction is not None)

    def test_rescan_after_stale_mating_keeps_both_pregnant(self, breeding_config: BreedingConfig) -> None:
        ewe = make_female(mating(170), scan(100))
        status = StatusClassifier(breeding_config).status_of(ewe, NOW)
        prediction = GestationPredictor(breeding_config).predict_birth_date(ewe, NOW)
        assert status is ReproductiveStatus.pregnant
        assert prediction is not None
        assert prediction.days_remaining == 50

    def test_negative_scan_after_positive_disables_both(self, breeding_config: BreedingConfig) -> None:
        ewe = make_female(scan(80), mating(60), scan(20, UltrasoundResult.negative))
        status = StatusClassifier(breeding_config).status_of(ewe, NOW)
        assert status is not ReproductiveStatus.pregnant
        assert GestationPredictor(breeding_config).predict_birth_date(ewe, NOW) is None

    def test_negative_scan_disables_both(self, breeding_config: BreedingConfig) -> None:
        ewe = make_female(mating(60), scan(20, UltrasoundResult.negative))
        status = StatusClassifier(breeding_config).status_of(ewe, NOW)
        assert status is not ReproductiveStatus.pregnant
        assert GestationPredictor(breeding_config).predict_birth_date(ewe, NOW) is None
