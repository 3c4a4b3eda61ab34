"""Abstract persistence boundary for test records."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from webtest_lab.models.record import TestRecord


class RecordStore(ABC):
    """Storage for test records.

    Implementations raise whatever their backend raises; the orchestrator
    wraps unexpected failures in ``InternalError``.
    """

    @abstractmethod
    async def save(self, record: TestRecord) -> None:
        """Insert or replace a record by id."""

    @abstractmethod
    async def find(self, test_id: str) -> TestRecord | None:
        """Return the record with the given id, or None."""

    @abstractmethod
    async def delete(self, test_id: str) -> bool:
        """Remove a record, returning whether it existed."""

    @abstractmethod
    async def list_by_owner(
        self,
        owner_id: str,
        *,
        test_type: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> Sequence[TestRecord]:
        """Return an owner's records, most recently created first.

        Records created at the same instant keep a stable order, newest
        insertion first.
        """

    @abstractmethod
    async def count_by_owner(self, owner_id: str) -> int:
        """Return how many records an owner has."""
