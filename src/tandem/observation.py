# Copyright (c) Syntropy Systems
"""Observations: the captured outcome of running one side of an experiment."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from tandem.errors import InvalidExperimentError
from tandem.models.record import ObservationRecord

if TYPE_CHECKING:
    from collections.abc import Callable

    from tandem.experiment import Experiment

CONTROL = "control"
CANDIDATE = "candidate"


@dataclass(frozen=True)
class Observation:
    """The value, error and duration of a single body execution.

    Build with ``Observation.capture``; instances never change afterwards.
    Exactly one of ``value`` and ``error`` is meaningful: ``value`` is None
    whenever ``error`` is set.
    """

    name: str
    experiment: Experiment = field(repr=False, compare=False)
    duration: float
    value: object = None
    error: Exception | None = None

    @classmethod
    def capture(
        cls,
        name: str,
        experiment: Experiment,
        body: Callable[[], object],
    ) -> Observation:
        """Run ``body`` once and record what happened.

        Any ``Exception`` raised by the body is stored on the observation.
        ``InvalidExperimentError`` and non-``Exception`` faults such as
        ``KeyboardInterrupt`` propagate immediately.

        Args:
            name: Observation name, usually "control" or "candidate"
            experiment: The experiment that owns this observation
            body: Zero-argument callable to execute

        """
        value: object = None
        error: Exception | None = None

        start = time.perf_counter()
        try:
            value = body()
        except InvalidExperimentError:
            raise
        except Exception as exc:  # noqa: BLE001
            error = exc
        finally:
            duration = time.perf_counter() - start

        return cls(
            name=name,
            experiment=experiment,
            duration=duration,
            value=value,
            error=error,
        )

    @property
    def raised(self) -> bool:
        """Return whether the body raised."""
        return self.error is not None

    @property
    def is_control(self) -> bool:
        return self.name == CONTROL

    @property
    def is_candidate(self) -> bool:
        return self.name == CANDIDATE

    @property
    def slug(self) -> str:
        """Identifier of the form ``<experiment>.<observation>``."""
        return f"{self.experiment.name}.{self.name}"

    @cached_property
    def publishable_value(self) -> object:
        """Value transformed by the experiment's ``publishable_value`` hook.

        Computed on first access and memoized.
        """
        return self.experiment.publishable_value(self)

    def to_record(self) -> ObservationRecord:
        """Convert to a JSON-safe record for publishing."""
        return ObservationRecord(
            name=self.name,
            experiment=self.experiment.name,
            slug=self.slug,
            value=self.publishable_value,
            duration=self.duration,
            error_class=type(self.error).__name__ if self.error is not None else None,
            error_message=str(self.error) if self.error is not None else None,
        )
