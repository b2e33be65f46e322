# Copyright (c) Syntropy Systems
"""Tests for publishing mixins and reading results back."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path

import pytest

from tandem.experiment import Experiment
from tandem.observation import Observation
from tandem.publishers import JsonlPublisher, LoggingPublisher, SafePublisher, read_results
from tandem.result import Result


class PaymentExperiment(Experiment):
    """Experiment whose candidate rounds differently from the control."""

    def enabled(self, context: Mapping[str, object]) -> bool:
        return True

    def control(self, context: Mapping[str, object]) -> object:
        return {"amount": 10.0, "currency": "EUR"}

    def candidate(self, context: Mapping[str, object]) -> object:
        amount = context.get("amount", 10.0)
        return {"amount": amount, "currency": "EUR"}


class FailingSink:
    """A publisher whose sink is unavailable."""

    def publish(self, result: Result) -> None:
        msg = "sink down"
        raise ConnectionError(msg)


def _jsonl_experiment(path: Path) -> PaymentExperiment:
    class Published(JsonlPublisher, PaymentExperiment):
        results_path = path

    return Published("payment-total")


class TestJsonlPublisher:
    """Tests for the JSONL publisher."""

    def test_writes_one_line_per_result(self, temp_dir: Path) -> None:
        """Test that each run appends one record."""
        path = temp_dir / "out" / "results.jsonl"
        experiment = _jsonl_experiment(path)

        _ = experiment.run()
        _ = experiment.run(amount=9.99)

        lines = path.read_text().splitlines()
        assert len(lines) == 2

        first = json.loads(lines[0])
        second = json.loads(lines[1])
        assert first["experiment"] == "payment-total"
        assert first["matched"] is True
        assert second["matched"] is False
        assert second["candidate"]["value"] == {"amount": 9.99, "currency": "EUR"}
        assert "error_class" not in second["candidate"]

    def test_configured_results_path(self, tandem_project: Path) -> None:
        """Test that the configured results file is used by default."""

        class Published(JsonlPublisher, PaymentExperiment):
            pass

        _ = Published("payment-total").run()

        records = read_results(tandem_project / ".tandem" / "results.jsonl")
        assert len(records) == 1
        assert records[0].matched

    def test_records_errors(self, temp_dir: Path) -> None:
        """Test that a raising candidate is recorded with its error."""
        path = temp_dir / "results.jsonl"

        class Broken(JsonlPublisher, PaymentExperiment):
            results_path = path

            def candidate(self, context: Mapping[str, object]) -> object:
                msg = "no rate"
                raise LookupError(msg)

        assert Broken("payment-total").run() == {"amount": 10.0, "currency": "EUR"}

        records = read_results(path)
        assert records[0].candidate.raised
        assert records[0].candidate.error_class == "LookupError"
        assert records[0].candidate.error_message == "no rate"
        assert records[0].mismatched


class TestLoggingPublisher:
    """Tests for the logging publisher."""

    def test_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that mismatches log at WARNING and matches at INFO."""

        class Logged(LoggingPublisher, PaymentExperiment):
            pass

        experiment = Logged("payment-total")
        with caplog.at_level(logging.INFO, logger="tandem.results"):
            _ = experiment.run()
            _ = experiment.run(amount=1.0)

        records = [r for r in caplog.records if r.name == "tandem.results"]
        assert [r.levelno for r in records] == [logging.INFO, logging.WARNING]
        assert '"experiment":"payment-total"' in records[0].getMessage()


class TestSafePublisher:
    """Tests for the publish guard."""

    def test_absorbs_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that publish failures are logged, not raised."""

        class Guarded(SafePublisher, FailingSink, PaymentExperiment):
            pass

        with caplog.at_level(logging.ERROR, logger="tandem.publishers"):
            value = Guarded("payment-total").run()

        assert value == {"amount": 10.0, "currency": "EUR"}
        assert "payment-total" in caplog.text
        assert "sink down" in caplog.text

    def test_unguarded_errors_propagate(self) -> None:
        """Test that without the guard publish failures reach the caller."""

        class Unguarded(FailingSink, PaymentExperiment):
            pass

        with pytest.raises(ConnectionError, match="sink down"):
            _ = Unguarded("payment-total").run()


class TestReadResults:
    """Tests for reading results files."""

    def test_read_nonexistent_file(self, temp_dir: Path) -> None:
        """Test reading a missing file."""
        assert read_results(temp_dir / "results.jsonl") == []

    def test_read_truncated_line(self, temp_dir: Path) -> None:
        """Test that a truncated final line is ignored."""
        path = temp_dir / "results.jsonl"
        experiment = _jsonl_experiment(path)
        _ = experiment.run()
        _ = experiment.run()

        with path.open("a") as f:
            _ = f.write('{"experiment": "payment-total", "matc')

        records = read_results(path)
        assert len(records) == 2
        assert all(r.experiment == "payment-total" for r in records)

    def test_record_observation_values(self, temp_dir: Path) -> None:
        """Test that observations survive the round trip through the file."""
        path = temp_dir / "results.jsonl"
        _ = _jsonl_experiment(path).run(amount=3.5)

        record = read_results(path)[0]
        assert record.control.slug == "payment-total.control"
        assert record.candidate.value == {"amount": 3.5, "currency": "EUR"}
        assert record.control.duration >= 0


def test_publishable_value_used(temp_dir: Path) -> None:
    """Test that the publishable_value hook shapes the published value."""
    path = temp_dir / "results.jsonl"

    class Redacted(JsonlPublisher, PaymentExperiment):
        results_path = path

        def publishable_value(self, observation: Observation) -> object:
            return {"currency": "EUR"}

    _ = Redacted("payment-total").run()

    record = read_results(path)[0]
    assert record.control.value == {"currency": "EUR"}
