# Copyright (c) Syntropy Systems
"""The result of a single experiment run."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from tandem.models.record import ResultRecord

if TYPE_CHECKING:
    from tandem.experiment import Experiment
    from tandem.observation import Observation


def utcnow() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class Result:
    """A control and a candidate Observation with the experiment's verdicts.

    ``matched`` and ``ignored`` are computed once, on construction, from
    ``Experiment.compare`` and ``Experiment.ignore``.
    """

    experiment: Experiment = field(repr=False, compare=False)
    control: Observation
    candidate: Observation
    matched: bool = field(init=False)
    ignored: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "matched", bool(self.experiment.compare(self.control, self.candidate))
        )
        object.__setattr__(
            self, "ignored", bool(self.experiment.ignore(self.control, self.candidate))
        )

    @property
    def observations(self) -> tuple[Observation, Observation]:
        return (self.control, self.candidate)

    def to_record(self) -> ResultRecord:
        """Convert to a JSON-safe record for publishing."""
        return ResultRecord(
            experiment=self.experiment.name,
            matched=self.matched,
            ignored=self.ignored,
            control=self.control.to_record(),
            candidate=self.candidate.to_record(),
            published_at=utcnow(),
        )
