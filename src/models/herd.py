"""Pydantic models for animal documents as stored in the herd register.

Reproduction records are deliberately loose: ``date``, ``type`` and
``ultrasoundResult`` stay raw, and ``AnimalDoc`` keeps its records
unvalidated, so that one corrupt event is dropped by the normalizer
instead of failing validation for the whole animal.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import Field

from src.breeding.base import AnimalStatus, Gender
from src.models.base import LadoumBase


class ReproductionRecordDoc(LadoumBase):
    id: str | int | None = None
    event_date: datetime | date | str | None = Field(default=None, alias="date")
    type: str
    mate_id: str | None = Field(default=None, alias="mateId")
    notes: str | None = None
    outcome: str | None = None
    heat_intensity: str | None = Field(default=None, alias="heatIntensity")
    offspring_count: int | None = Field(default=None, alias="offspringCount", ge=0)
    ultrasound_result: str | None = Field(default=None, alias="ultrasoundResult")


class AnimalDoc(LadoumBase):
    id: str
    name: str | None = None
    gender: Gender
    status: AnimalStatus = AnimalStatus.active
    # Validated one by one as ReproductionRecordDoc during normalization
    reproduction_records: list[Any] = Field(default_factory=list, alias="reproductionRecords")
