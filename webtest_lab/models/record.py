"""Persisted test records and the status state machine."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field, computed_field, model_validator

from webtest_lab.models.base import Model
from webtest_lab.models.request import TestRequest, TestType, ensure_scheme
from webtest_lab.models.results import TestResults
from webtest_lab.scoring import display_score

type TestStatus = Literal["pending", "running", "completed", "failed"]

TERMINAL_STATUSES: frozenset[TestStatus] = frozenset(["completed", "failed"])


class TestRecord(Model):
    """One requested test and its latest outcome.

    Records are immutable values; each transition returns a new record that
    the caller persists. Results are present only when completed and the
    error message only when failed.
    """

    __test__ = False

    # Dumped records carry the computed score; accept it back on load.
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    owner_id: str
    url: str
    test_type: TestType
    parameters: Mapping[str, Any] = Field(default_factory=dict)
    status: TestStatus = "pending"
    results: TestResults | None = None
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _check_outcome_fields(self) -> "TestRecord":
        if (self.results is not None) != (self.status == "completed"):
            raise ValueError("results must be set exactly when status is completed")
        if (self.error_message is not None) != (self.status == "failed"):
            raise ValueError("error_message must be set exactly when status is failed")
        return self

    @classmethod
    def from_request(
        cls, request: TestRequest, *, test_id: str, now: datetime
    ) -> "TestRecord":
        """Create a pending record for an accepted request."""
        return cls(
            id=test_id,
            owner_id=request.owner_id,
            url=request.url,
            test_type=request.test_type,
            parameters=request.parameters,
            created_at=now,
            updated_at=now,
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int | None:
        """Displayed 0-100 score, None until the test completes."""
        return display_score(self.test_type, self.results)

    @property
    def is_terminal(self) -> bool:
        """Whether the latest run has finished."""
        return self.status in TERMINAL_STATUSES

    @property
    def target_url(self) -> str:
        """URL handed to engines, always carrying a scheme."""
        return ensure_scheme(self.url)

    def mark_running(self, now: datetime) -> "TestRecord":
        """Start a fresh execution, discarding any previous outcome."""
        return self.model_copy(
            update={
                "status": "running",
                "results": None,
                "error_message": None,
                "updated_at": now,
            }
        )

    def mark_completed(self, results: TestResults, now: datetime) -> "TestRecord":
        """Finish the current execution successfully."""
        self._require_running()
        return self.model_copy(
            update={
                "status": "completed",
                "results": results,
                "error_message": None,
                "updated_at": now,
            }
        )

    def mark_failed(self, message: str, now: datetime) -> "TestRecord":
        """Finish the current execution with an error."""
        self._require_running()
        return self.model_copy(
            update={
                "status": "failed",
                "results": None,
                "error_message": message or "Test failed",
                "updated_at": now,
            }
        )

    def _require_running(self) -> None:
        if self.status != "running":
            raise ValueError(
                f"Test '{self.id}' cannot finish from status '{self.status}'"
            )


class TestPage(Model):
    """One page of a user's tests, most recent first."""

    __test__ = False

    tests: Sequence[TestRecord]
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
