"""Test lifecycle manager: validation, dispatch, state machine and persistence."""

import logging
import math
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from webtest_lab.aggregation import DashboardAggregator, DashboardStats
from webtest_lab.browser.playwright_session import PlaywrightSessionFactory
from webtest_lab.config import WebTestLabConfig
from webtest_lab.demo import demo_results
from webtest_lab.errors import (
    ForbiddenError,
    InternalError,
    InvalidRequestError,
    RecordNotFoundError,
    RunnerError,
)
from webtest_lab.models.record import TestPage, TestRecord
from webtest_lab.models.request import Caller, TestRequest
from webtest_lab.models.results import TestResults
from webtest_lab.normalizer import normalize
from webtest_lab.runners.loading import RunnerTable, get_runner, open_runners
from webtest_lab.store.base import RecordStore

log = logging.getLogger(__name__)

type Authorizer = Callable[[Caller, TestRecord], bool]
type Clock = Callable[[], datetime]

MAX_PAGE_SIZE = 100


def is_owner_or_admin(caller: Caller, record: TestRecord) -> bool:
    """Allow the record's owner and administrators."""
    return caller.is_admin or record.owner_id == caller.id


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def new_test_id() -> str:
    """Random record identifier."""
    return uuid.uuid4().hex


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into one readable message."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages)


@dataclass(frozen=True, kw_only=True)
class TestLifecycleManager:
    """Creates, runs and reads test records on behalf of callers.

    Each run executes end-to-end within the awaiting caller. Two concurrent
    runs of the same record are not serialized; the last write wins.
    """

    __test__ = False

    store: RecordStore
    runners: RunnerTable
    authorizer: Authorizer = is_owner_or_admin
    clock: Clock = utc_now
    id_factory: Callable[[], str] = new_test_id

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: WebTestLabConfig, store: RecordStore
    ) -> AsyncGenerator["TestLifecycleManager", None]:
        """Create a manager whose runners use Playwright and a live HTTP session."""
        session_factory = PlaywrightSessionFactory(config=config.browser)
        async with open_runners(config, session_factory) as runners:
            yield cls(store=store, runners=runners)

    async def create(
        self,
        caller: Caller,
        url: str | None,
        test_type: str | None,
        parameters: Mapping[str, Any] | None = None,
    ) -> TestRecord:
        """Validate a request and persist it as a pending test.

        Raises:
            InvalidRequestError: If the url, test type or parameters are
                missing or invalid

        """
        if not url or not test_type:
            raise InvalidRequestError("Please provide a URL and test type")

        try:
            request = TestRequest.model_validate(
                {
                    "owner_id": caller.id,
                    "url": url,
                    "test_type": test_type,
                    "parameters": parameters or {},
                }
            )
        except ValidationError as exc:
            raise InvalidRequestError(describe_validation_error(exc)) from exc

        record = TestRecord.from_request(
            request, test_id=self.id_factory(), now=self.clock()
        )
        await self._save(record)
        log.info(
            "Created test %s: type=%s url=%s owner=%s",
            record.id,
            record.test_type,
            record.url,
            record.owner_id,
        )
        return record

    async def run(self, test_id: str, caller: Caller) -> TestRecord:
        """Run a test with its engine and persist the outcome.

        Returns:
            The completed record

        Raises:
            RecordNotFoundError: If the test does not exist
            ForbiddenError: If the caller may not run the test
            UnsupportedTestTypeError: If no engine handles the test type
            RunnerError: If the engine failed; the record is saved as failed
            InternalError: On unexpected failures; the record is saved as failed

        """
        record = await self._authorized(test_id, caller, action="run")
        runner = get_runner(self.runners, record.test_type)

        async def produce(running: TestRecord) -> TestResults:
            raw = await runner.run(running.target_url, running.parameters)
            return normalize(running.test_type, raw)

        return await self._execute(record, produce)

    async def run_demo(self, test_id: str, caller: Caller) -> TestRecord:
        """Complete a test with synthetic results, without running any engine.

        The results are marked ``synthetic``; this never happens in ``run``.
        """
        record = await self._authorized(test_id, caller, action="run")

        async def produce(running: TestRecord) -> TestResults:
            return demo_results(running.test_type)

        log.warning("Running test %s in demo mode", record.id)
        return await self._execute(record, produce)

    async def get(self, test_id: str, caller: Caller) -> TestRecord:
        """Return a test the caller may read."""
        return await self._authorized(test_id, caller, action="access")

    async def delete(self, test_id: str, caller: Caller) -> None:
        """Remove a test the caller owns.

        Raises:
            RecordNotFoundError: If the test does not exist, including when it
                was already deleted

        """
        await self._authorized(test_id, caller, action="delete")
        try:
            removed = await self.store.delete(test_id)
        except Exception as exc:
            raise InternalError(f"Failed to delete test '{test_id}': {exc}") from exc
        if not removed:
            raise RecordNotFoundError(test_id)
        log.info("Deleted test %s", test_id)

    async def list_tests(
        self, caller: Caller, test_type: str | None = None
    ) -> Sequence[TestRecord]:
        """Return all of the caller's tests, most recent first."""
        try:
            return await self.store.list_by_owner(caller.id, test_type=test_type)
        except Exception as exc:
            raise InternalError(f"Failed to list tests: {exc}") from exc

    async def list_paginated(
        self, caller: Caller, page: int = 1, page_size: int = 10
    ) -> TestPage:
        """Return one page of the caller's tests, most recent first.

        Page numbers start at 1; out-of-range values are clamped.
        """
        page = max(1, page)
        page_size = min(max(1, page_size), MAX_PAGE_SIZE)

        try:
            total_count = await self.store.count_by_owner(caller.id)
            tests = await self.store.list_by_owner(
                caller.id, offset=(page - 1) * page_size, limit=page_size
            )
        except Exception as exc:
            raise InternalError(f"Failed to list tests: {exc}") from exc

        return TestPage(
            tests=tests,
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=math.ceil(total_count / page_size),
        )

    async def stats(self, caller: Caller) -> DashboardStats:
        """Return dashboard statistics; never raises on internal errors."""
        return await DashboardAggregator(store=self.store).stats(caller.id)

    async def _execute(
        self,
        record: TestRecord,
        produce: Callable[[TestRecord], Awaitable[TestResults]],
    ) -> TestRecord:
        """Drive one execution from running to a terminal state."""
        running = record.mark_running(self.clock())
        await self._save(running)
        log.info(
            "Running test %s: type=%s url=%s",
            running.id,
            running.test_type,
            running.target_url,
        )

        try:
            results = await produce(running)
        except RunnerError as exc:
            log.error("Test %s failed: %s", running.id, exc, exc_info=exc)
            await self._save(running.mark_failed(str(exc), self.clock()))
            raise
        except Exception as exc:
            log.error("Test %s failed unexpectedly: %s", running.id, exc, exc_info=exc)
            await self._save(
                running.mark_failed(str(exc) or type(exc).__name__, self.clock())
            )
            raise InternalError(f"Test '{running.id}' failed unexpectedly: {exc}") from exc

        completed = running.mark_completed(results, self.clock())
        await self._save(completed)
        log.info("Test %s completed: score=%s", completed.id, completed.score)
        return completed

    async def _authorized(self, test_id: str, caller: Caller, *, action: str) -> TestRecord:
        try:
            record = await self.store.find(test_id)
        except Exception as exc:
            raise InternalError(f"Failed to load test '{test_id}': {exc}") from exc

        if record is None:
            raise RecordNotFoundError(test_id)
        if not self.authorizer(caller, record):
            raise ForbiddenError(f"Not authorized to {action} test '{test_id}'")
        return record

    async def _save(self, record: TestRecord) -> None:
        try:
            await self.store.save(record)
        except Exception as exc:
            raise InternalError(f"Failed to save test '{record.id}': {exc}") from exc
