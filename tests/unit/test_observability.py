"""Unit tests for structured JSON logging."""
import json
import logging
import os
import sys
import time

import pytest

import observability
from observability import JSONFormatter, cleanup_old_logs, log_data_structure, log_workflow


@pytest.fixture
def test_logger():
    logger = logging.getLogger("fitplan.tests.observability")
    logger.setLevel(logging.DEBUG)
    return logger


def _fields(caplog):
    return [record.extra_fields for record in caplog.records if hasattr(record, "extra_fields")]


@pytest.mark.priority_medium
@pytest.mark.unit
class TestJSONFormatter:

    def test_extra_fields_are_merged(self):
        record = logging.LogRecord("fitplan.pipeline", logging.INFO, __file__, 10, "accepted", None, None)
        record.extra_fields = {"category": "MACRO_SET", "attempt": 2}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "accepted"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "fitplan.pipeline"
        assert (entry["category"], entry["attempt"]) == ("MACRO_SET", 2)

    def test_exception_is_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: boom" in entry["exception"]


@pytest.mark.priority_medium
@pytest.mark.unit
class TestLogDataStructure:

    def test_small_payload_is_logged_whole(self, test_logger, caplog):
        with caplog.at_level(logging.DEBUG, logger=test_logger.name):
            log_data_structure(test_logger, "Parsed", {"a": 1}, attempt=1)

        fields = _fields(caplog)[-1]
        assert json.loads(fields["data"]) == {"a": 1}
        assert fields["truncated"] is False
        assert fields["attempt"] == 1

    def test_large_payload_is_truncated(self, test_logger, caplog):
        text = "x" * (observability.MAX_LOGGED_PAYLOAD_CHARS + 10)

        with caplog.at_level(logging.DEBUG, logger=test_logger.name):
            log_data_structure(test_logger, "Raw AI response", text)

        fields = _fields(caplog)[-1]
        assert fields["truncated"] is True
        assert fields["full_size"] == len(text)
        assert len(fields["data"]) == observability.MAX_LOGGED_PAYLOAD_CHARS
        assert caplog.records[-1].getMessage() == "Raw AI response (truncated)"

    def test_unserializable_payload_does_not_raise(self, test_logger, caplog):
        circular = {}
        circular["self"] = circular

        with caplog.at_level(logging.DEBUG, logger=test_logger.name):
            log_data_structure(test_logger, "Parsed", circular)

        assert _fields(caplog)[-1]["data"] == "<non-serializable: dict>"
        assert any(record.levelno == logging.WARNING for record in caplog.records)


@pytest.mark.priority_medium
@pytest.mark.unit
class TestLogWorkflow:

    def test_start_and_complete(self, test_logger, caplog):
        with caplog.at_level(logging.INFO, logger=test_logger.name):
            with log_workflow(test_logger, "meal_plan", tier="affordable"):
                pass

        phases = [fields["phase"] for fields in _fields(caplog)]
        assert phases == ["start", "complete"]
        assert all(fields["tier"] == "affordable" for fields in _fields(caplog))
        assert _fields(caplog)[-1]["duration_ms"] >= 0

    def test_failure_is_logged_and_reraised(self, test_logger, caplog):
        with caplog.at_level(logging.INFO, logger=test_logger.name):
            with pytest.raises(ValueError, match="bad tier"):
                with log_workflow(test_logger, "day_plan"):
                    raise ValueError("bad tier")

        failure = _fields(caplog)[-1]
        assert failure["phase"] == "error"
        assert failure["error_type"] == "ValueError"
        assert caplog.records[-1].exc_info is not None


@pytest.mark.priority_medium
@pytest.mark.unit
class TestCleanupOldLogs:

    def test_only_expired_logs_are_removed(self, tmp_path):
        old = tmp_path / "fitplan.pipeline.jsonl.2020-01-01"
        fresh = tmp_path / "fitplan.pipeline.jsonl"
        other = tmp_path / "notes.txt"
        for path in (old, fresh, other):
            path.write_text("{}\n")
        expired = time.time() - 30 * 86400
        os.utime(old, (expired, expired))
        os.utime(other, (expired, expired))

        assert cleanup_old_logs(tmp_path, retention_days=7) == 1
        assert not old.exists()
        assert fresh.exists() and other.exists()
