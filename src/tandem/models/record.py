# Copyright (c) Syntropy Systems
"""Pydantic models for published experiment results."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import JSONValue, TandemBaseModel, json_safe


class ObservationRecord(TandemBaseModel):
    """Structured form of one Observation."""

    name: str
    experiment: str
    slug: str
    value: JSONValue | None = None
    duration: float
    error_class: str | None = None
    error_message: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: object) -> JSONValue:
        return json_safe(value)

    @property
    def raised(self) -> bool:
        """Return whether the observed body raised."""
        return self.error_class is not None


class ResultRecord(TandemBaseModel):
    """Structured form of one Result, as written by publishers."""

    experiment: str
    matched: bool
    ignored: bool = False
    control: ObservationRecord
    candidate: ObservationRecord
    published_at: str | None = Field(default=None)

    @property
    def mismatched(self) -> bool:
        """Return whether this result is a mismatch worth looking at."""
        return not self.matched and not self.ignored
