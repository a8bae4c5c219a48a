"""Canonical data models for the Ladoum breeding engine.

Every predictor reads ``Animal`` / ``ReproductionRecord`` and returns
``HeatPrediction`` / ``GestationPrediction``.  Records are immutable facts
owned by the herd register; nothing in the engine creates or edits them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Sequence

logger = logging.getLogger("ladoum.breeding")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EventType(str, Enum):
    heat = "Heat"
    mating = "Mating"
    ultrasound = "Ultrasound"
    birth = "Birth"
    abortion = "Abortion"
    weaning = "Weaning"
    lactation = "Lactation"


class UltrasoundResult(str, Enum):
    positive = "Positive"
    negative = "Negative"


class Gender(str, Enum):
    male = "Male"
    female = "Female"


class AnimalStatus(str, Enum):
    active = "Active"
    sold = "Sold"
    deceased = "Deceased"


class ReproductiveStatus(str, Enum):
    available = "Available"
    in_heat = "InHeat"
    pregnant = "Pregnant"
    lactating = "Lactating"
    resting = "Resting"


class Confidence(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


# Same-day records sort in this order (latest first when scanning backwards)
_EVENT_RANK = {event_type: rank for rank, event_type in enumerate(EventType)}


# ---------------------------------------------------------------------------
# Herd register records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReproductionRecord:
    """One breeding-related event for a female.

    Attributes:
        type:              Event kind.
        date:              Calendar date of the event.  ``None`` means the
                           stored date could not be parsed; such records
                           are ignored by every predictor.
        mate_id:           Ram involved in a Mating.
        ultrasound_result: Scan outcome; absent counts as not negative.
        outcome:           Free-text outcome recorded by the caretaker.
        notes:             Free-text notes.
        record_id:         Identifier in the herd register.
        heat_intensity:    Observed intensity for Heat events.
        offspring_count:   Lambs born for Birth events.
    """

    type: EventType
    date: date | None
    mate_id: str | None = None
    ultrasound_result: UltrasoundResult | None = None
    outcome: str | None = None
    notes: str | None = None
    record_id: str | None = None
    heat_intensity: str | None = None
    offspring_count: int | None = None

    @property
    def is_negative_ultrasound(self) -> bool:
        return (
            self.type is EventType.ultrasound
            and self.ultrasound_result is UltrasoundResult.negative
        )

    @property
    def is_positive_ultrasound(self) -> bool:
        """Ultrasounds without a recorded result count as confirmations."""
        return self.type is EventType.ultrasound and not self.is_negative_ultrasound


@dataclass(frozen=True)
class Animal:
    """The slice of an animal's register entry the engine needs."""

    animal_id: str
    gender: Gender
    status: AnimalStatus = AnimalStatus.active
    reproduction_records: tuple[ReproductionRecord, ...] = ()
    name: str | None = None

    @property
    def is_breeding_female(self) -> bool:
        return self.gender is Gender.female and self.status is AnimalStatus.active


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeatPrediction:
    """Forecast of a female's next heat.

    Attributes:
        next_heat_date:       Predicted heat date, always after the reference date.
        window_start:         First day of the surveillance window.
        window_end:           Last day of the surveillance window.
        confidence:           Tier derived from the number of recorded heats.
        based_on_cycles:      Number of heat records in the history.
        average_cycle_length: Personal (or default) cycle length in days.
        reproductive_status:  Status the forecast was anchored on.
    """

    next_heat_date: date
    window_start: date
    window_end: date
    confidence: Confidence
    based_on_cycles: int
    average_cycle_length: int
    reproductive_status: ReproductiveStatus

    def days_until(self, now: date) -> int:
        return (self.next_heat_date - now).days


@dataclass(frozen=True)
class GestationPrediction:
    """Forecast of a pregnant female's lambing date.

    Attributes:
        expected_birth_date: Anchor date plus the gestation period.
        window_start:        First day of the lambing watch window.
        window_end:          Last day of the lambing watch window.
        days_remaining:      Days from the reference date; <= 0 when overdue.
        mating_date:         Date of the event the pregnancy is dated from.
        confidence:          High once confirmed by ultrasound.
    """

    expected_birth_date: date
    window_start: date
    window_end: date
    days_remaining: int
    mating_date: date
    confidence: Confidence


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------


def dated_records(records: Sequence[ReproductionRecord]) -> list[ReproductionRecord]:
    """Return the records that carry a usable date, most recent first.

    Same-day records are ordered by event type so the result never depends
    on the order the register returned them in.
    """
    usable = [r for r in records if r.date is not None]
    skipped = len(records) - len(usable)
    if skipped:
        logger.debug("Ignoring %d undated reproduction record(s)", skipped)
    return sorted(usable, key=lambda r: (r.date, _EVENT_RANK[r.type]), reverse=True)


def any_after(
    records: list[ReproductionRecord],
    after: date,
    *types: EventType,
) -> bool:
    """True if any record of the given types is dated strictly after ``after``."""
    return any(r.type in types and r.date > after for r in records)


@dataclass(frozen=True)
class History:
    """An animal's dated records, sorted once and shared by the predictors."""

    records: list[ReproductionRecord] = field(default_factory=list)

    @classmethod
    def of(cls, records: Sequence[ReproductionRecord]) -> History:
        return cls(dated_records(records))

    def latest(self, *types: EventType) -> ReproductionRecord | None:
        """Most recent record of the given types (any type if none given)."""
        for record in self.records:
            if not types or record.type in types:
                return record
        return None

    def negative_ultrasound_after(self, after: date) -> bool:
        return any(r.is_negative_ultrasound and r.date > after for r in self.records)

    def positive_ultrasound_after(self, after: date) -> bool:
        return any(r.is_positive_ultrasound and r.date > after for r in self.records)

    def outcome_after(self, after: date) -> bool:
        return any_after(self.records, after, EventType.birth, EventType.abortion)

    def weaning_after(self, after: date) -> bool:
        return any_after(self.records, after, EventType.weaning)
