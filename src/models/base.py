"""Shared Pydantic base models for herd register documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LadoumBase(BaseModel):
    """Base model with shared config for all Ladoum document schemas.

    Register documents use camelCase keys; fields declare them as aliases
    and can still be populated by their Python names.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )
