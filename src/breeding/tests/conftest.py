"""Shared fixtures and record builders for breeding engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.breeding.base import (
    Animal,
    AnimalStatus,
    EventType,
    Gender,
    ReproductionRecord,
    UltrasoundResult,
)
from src.breeding.config_loader import BreedingConfig, load_breeding_config

# Canonical reference date for tests
NOW = date(2024, 6, 1)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def days_ago(n: int, now: date = NOW) -> date:
    return now - timedelta(days=n)


def make_record(
    event_type: EventType,
    on: date | None,
    ultrasound_result: UltrasoundResult | None = None,
) -> ReproductionRecord:
    return ReproductionRecord(type=event_type, date=on, ultrasound_result=ultrasound_result)


def heat(n_days_ago: int) -> ReproductionRecord:
    return make_record(EventType.heat, days_ago(n_days_ago))


def mating(n_days_ago: int) -> ReproductionRecord:
    return make_record(EventType.mating, days_ago(n_days_ago))


def scan(n_days_ago: int, result: UltrasoundResult | None = UltrasoundResult.positive) -> ReproductionRecord:
    return make_record(EventType.ultrasound, days_ago(n_days_ago), result)


def birth(n_days_ago: int) -> ReproductionRecord:
    return make_record(EventType.birth, days_ago(n_days_ago))


def make_female(
    *records: ReproductionRecord,
    animal_id: str = "ewe-1",
    status: AnimalStatus = AnimalStatus.active,
) -> Animal:
    return Animal(
        animal_id=animal_id,
        gender=Gender.female,
        status=status,
        reproduction_records=tuple(records),
    )


def make_male(*records: ReproductionRecord, animal_id: str = "ram-1") -> Animal:
    return Animal(animal_id=animal_id, gender=Gender.male, reproduction_records=tuple(records))


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def breeding_config() -> BreedingConfig:
    """Load the real bundled breeding config for tests."""
    return load_breeding_config()
