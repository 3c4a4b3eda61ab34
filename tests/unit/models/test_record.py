"""Tests for TestRecord transitions."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from webtest_lab.models.record import TestRecord
from webtest_lab.models.request import TestRequest
from webtest_lab.models.results import SecurityResult, TestResults
from webtest_lab.testing.factories import PerformanceResultFactory, TestRecordFactory

NOW = datetime(2099, 1, 1, tzinfo=timezone.utc)
LATER = NOW + timedelta(minutes=1)


def test_from_request_is_pending() -> None:
    """New records are pending with no outcome."""
    request = TestRequest(owner_id="u1", url="example.com", test_type="security")

    record = TestRecord.from_request(request, test_id="t1", now=NOW)

    assert record.status == "pending"
    assert record.results is None
    assert record.error_message is None
    assert record.parameters == {"scan_type": "baseline"}
    assert record.created_at == record.updated_at == NOW
    assert record.score is None


def test_completed_record_has_results_only() -> None:
    """Completing sets results and clears the error."""
    results = TestResults(performance=PerformanceResultFactory.build(score=0.85))
    record = TestRecordFactory.build().mark_running(NOW)

    completed = record.mark_completed(results, LATER)

    assert completed.status == "completed"
    assert completed.results == results
    assert completed.error_message is None
    assert completed.updated_at == LATER
    assert completed.score == 85


def test_failed_record_has_error_only() -> None:
    """Failing sets the message and clears results."""
    record = TestRecordFactory.build().mark_running(NOW)

    failed = record.mark_failed("boom", LATER)

    assert failed.status == "failed"
    assert failed.results is None
    assert failed.error_message == "boom"
    assert failed.is_terminal


def test_rerun_clears_previous_outcome() -> None:
    """Running a failed record again discards its error."""
    failed = TestRecordFactory.build().mark_running(NOW).mark_failed("boom", NOW)

    running = failed.mark_running(LATER)

    assert running.status == "running"
    assert running.error_message is None
    assert not running.is_terminal


@pytest.mark.parametrize("status", ["pending", "completed", "failed"])
def test_finishing_requires_running(status: str) -> None:
    """Only running records can complete or fail."""
    record = TestRecordFactory.build()
    if status == "completed":
        record = record.mark_running(NOW).mark_completed(
            TestResults(security=SecurityResult(score=90)), NOW
        )
    elif status == "failed":
        record = record.mark_running(NOW).mark_failed("boom", NOW)

    with pytest.raises(ValueError, match="cannot finish"):
        record.mark_failed("again", LATER)


def test_rejects_results_without_completed_status() -> None:
    """Results and status must agree."""
    with pytest.raises(ValidationError):
        TestRecordFactory.build(
            status="running", results=TestResults(security=SecurityResult(score=50))
        )


def test_rejects_failed_without_message() -> None:
    """A failed record always carries a message."""
    with pytest.raises(ValidationError):
        TestRecordFactory.build(status="failed", error_message=None)


def test_dumped_record_reloads() -> None:
    """A JSON dump, including the computed score, loads back."""
    record = (
        TestRecordFactory.build(test_type="security")
        .mark_running(NOW)
        .mark_completed(TestResults(security=SecurityResult(score=74.5, grade="B")), NOW)
    )

    dumped = record.model_dump(mode="json")
    loaded = TestRecord.model_validate(dumped)

    assert dumped["score"] == 75
    assert loaded == record


def test_target_url_adds_scheme() -> None:
    """Records hand engines a URL with a scheme."""
    record = TestRecordFactory.build(url="example.com/path")

    assert record.target_url == "https://example.com/path"
