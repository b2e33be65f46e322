# Copyright (c) Syntropy Systems
"""Publishing mixins that turn Results into structured records.

Mix these into an application-wide Experiment base class::

    class AppExperiment(SafePublisher, JsonlPublisher, Experiment):
        results_path = Path("/var/log/app/experiments.jsonl")

``SafePublisher`` must come first so it wraps the publishers after it.
"""
from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import TYPE_CHECKING, ClassVar

from pydantic import ValidationError

from tandem.config import get_results_path
from tandem.models.record import ResultRecord

if TYPE_CHECKING:
    from pathlib import Path

    from tandem.result import Result

logger = logging.getLogger(__name__)
results_logger = logging.getLogger("tandem.results")


class JsonlPublisher:
    """Append each Result as one JSON line.

    Set ``results_path`` on the subclass; when unset, the path configured in
    the nearest ``.tandem/config.yaml`` is used.
    """

    results_path: ClassVar[Path | None] = None
    _write_lock: ClassVar[threading.Lock] = threading.Lock()

    def publish(self, result: Result) -> None:
        path = self.results_path or get_results_path()
        line = result.to_record().model_dump_json(exclude_none=True)
        with self._write_lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a") as f:
                _ = f.write(line + "\n")
                _ = f.flush()
        super().publish(result)  # type: ignore[misc]


class LoggingPublisher:
    """Log each Result to the ``tandem.results`` logger.

    Mismatches that are not ignored are logged at WARNING, everything else
    at INFO.
    """

    def publish(self, result: Result) -> None:
        record = result.to_record()
        level = logging.WARNING if record.mismatched else logging.INFO
        results_logger.log(level, record.model_dump_json(exclude_none=True))
        super().publish(result)  # type: ignore[misc]


class SafePublisher:
    """Keep publish failures away from the caller of ``run``.

    Errors raised by the publishers later in the MRO are logged and dropped.
    """

    def publish(self, result: Result) -> None:
        try:
            super().publish(result)  # type: ignore[misc]
        except Exception:
            logger.exception(
                "Publishing result for experiment %s failed",
                result.experiment.name,
            )


def read_results(results_path: Path) -> list[ResultRecord]:
    """Read results from a JSONL file, tolerating partial final lines.

    Args:
        results_path: Path to a results JSONL file

    Returns:
        List of parsed result records

    """
    results: list[ResultRecord] = []

    if not results_path.exists():
        return results

    with results_path.open() as f:
        for raw_line in f:
            line = raw_line.strip()
            if line:
                with suppress(ValidationError):
                    results.append(ResultRecord.model_validate_json(line))

    return results
