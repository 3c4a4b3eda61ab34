"""Dashboard statistics over a user's test records."""

import logging
from collections import Counter
from dataclasses import dataclass

from pydantic import Field

from webtest_lab.models.base import Model
from webtest_lab.scoring import percent, round_half_up
from webtest_lab.store.base import RecordStore

log = logging.getLogger(__name__)


class DashboardStats(Model):
    """Counts per status and the average performance score."""

    total_tests: int = Field(default=0, ge=0)
    completed_tests: int = Field(default=0, ge=0)
    failed_tests: int = Field(default=0, ge=0)
    pending_tests: int = Field(default=0, ge=0)
    running_tests: int = Field(default=0, ge=0)
    avg_performance: int = Field(default=0, ge=0, le=100)


@dataclass(frozen=True, kw_only=True)
class DashboardAggregator:
    """Computes dashboard statistics from the record store."""

    store: RecordStore

    async def stats(self, owner_id: str) -> DashboardStats:
        """Summarize an owner's records.

        On any internal error the failure is logged and zeroed statistics are
        returned, so "no data" and "error" are only distinguishable in logs.
        """
        try:
            return await self._compute(owner_id)
        except Exception:
            log.exception("Failed to compute dashboard stats for owner %s", owner_id)
            return DashboardStats()

    async def _compute(self, owner_id: str) -> DashboardStats:
        records = await self.store.list_by_owner(owner_id)
        statuses = Counter(record.status for record in records)

        performance_scores = [
            percent(record.results.performance.score)
            for record in records
            if record.status == "completed"
            and record.results is not None
            and record.results.performance is not None
        ]
        avg_performance = (
            round_half_up(sum(performance_scores) / len(performance_scores))
            if performance_scores
            else 0
        )

        return DashboardStats(
            total_tests=len(records),
            completed_tests=statuses["completed"],
            failed_tests=statuses["failed"],
            pending_tests=statuses["pending"],
            running_tests=statuses["running"],
            avg_performance=avg_performance,
        )
