"""Normalize herd register documents into canonical engine models.

Register documents arrive as camelCase dicts (or already-validated
``AnimalDoc`` models).  A record whose date or type cannot be understood is
dropped with a warning; the animal's other records are still used.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from src.breeding.base import Animal, EventType, ReproductionRecord, UltrasoundResult
from src.models.herd import AnimalDoc, ReproductionRecordDoc

logger = logging.getLogger("ladoum.breeding.records")


def parse_event_date(value: Any) -> date | None:
    """Parse a register date into a calendar date.

    Accepts ``date``/``datetime`` objects and ISO-8601 strings, with or
    without a time part (``2024-01-01``, ``2024-01-01T08:30:00Z``).

    Returns:
        The calendar date, or None if the value is missing or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None


def normalize_record(doc: ReproductionRecordDoc, animal_id: str = "?") -> ReproductionRecord | None:
    """Convert one register record, or return None if it must be skipped."""
    event_date = parse_event_date(doc.event_date)
    if event_date is None:
        logger.warning(
            "%s: skipping %s record %s with unparseable date %r",
            animal_id,
            doc.type,
            doc.id,
            doc.event_date,
        )
        return None

    try:
        event_type = EventType(doc.type)
    except ValueError:
        logger.warning("%s: skipping record %s with unknown type %r", animal_id, doc.id, doc.type)
        return None

    ultrasound_result = None
    if doc.ultrasound_result:
        try:
            ultrasound_result = UltrasoundResult(doc.ultrasound_result)
        except ValueError:
            # Unknown scan results count as unconfirmed, never as negative
            logger.warning(
                "%s: ignoring unknown ultrasound result %r on record %s",
                animal_id,
                doc.ultrasound_result,
                doc.id,
            )

    return ReproductionRecord(
        type=event_type,
        date=event_date,
        mate_id=doc.mate_id,
        ultrasound_result=ultrasound_result,
        outcome=doc.outcome,
        notes=doc.notes,
        record_id=None if doc.id is None else str(doc.id),
        heat_intensity=doc.heat_intensity,
        offspring_count=doc.offspring_count,
    )


def normalize_animal(payload: AnimalDoc | dict[str, Any]) -> Animal:
    """Build an engine ``Animal`` from a register document.

    Each reproduction record is validated on its own; one that fails
    validation or normalization is logged and skipped.

    Args:
        payload: Raw document dict or a validated AnimalDoc.

    Returns:
        Animal with every usable reproduction record.

    Raises:
        pydantic.ValidationError: If the animal itself (id, gender, status)
            is invalid.
    """
    doc = payload if isinstance(payload, AnimalDoc) else AnimalDoc.model_validate(payload)
    records = []
    for index, raw in enumerate(doc.reproduction_records):
        try:
            record_doc = ReproductionRecordDoc.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "%s: skipping invalid reproduction record #%d: %d error(s), first: %s",
                doc.id,
                index,
                exc.error_count(),
                exc.errors()[0]["msg"],
            )
            continue
        record = normalize_record(record_doc, doc.id)
        if record is not None:
            records.append(record)
    return Animal(
        animal_id=doc.id,
        name=doc.name,
        gender=doc.gender,
        status=doc.status,
        reproduction_records=tuple(records),
    )
