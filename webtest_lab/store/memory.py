"""In-memory record store for the CLI and tests."""

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field

from webtest_lab.models.record import TestRecord
from webtest_lab.store.base import RecordStore


@dataclass(kw_only=True)
class InMemoryRecordStore(RecordStore):
    """Keeps records in a dict; insertion order breaks timestamp ties."""

    records: dict[str, TestRecord] = field(default_factory=dict)
    _sequence: dict[str, int] = field(default_factory=dict, repr=False)
    _counter: "itertools.count[int]" = field(default_factory=itertools.count, repr=False)

    async def save(self, record: TestRecord) -> None:
        """Insert or replace a record by id."""
        if record.id not in self._sequence:
            self._sequence[record.id] = next(self._counter)
        self.records[record.id] = record

    async def find(self, test_id: str) -> TestRecord | None:
        """Return the record with the given id, or None."""
        return self.records.get(test_id)

    async def delete(self, test_id: str) -> bool:
        """Remove a record, returning whether it existed."""
        self._sequence.pop(test_id, None)
        return self.records.pop(test_id, None) is not None

    async def list_by_owner(
        self,
        owner_id: str,
        *,
        test_type: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> Sequence[TestRecord]:
        """Return an owner's records, most recently created first."""
        owned = [
            record
            for record in self.records.values()
            if record.owner_id == owner_id
            and (test_type is None or record.test_type == test_type)
        ]
        owned.sort(
            key=lambda record: (record.created_at, self._sequence[record.id]),
            reverse=True,
        )
        end = None if limit is None else offset + limit
        return owned[offset:end]

    async def count_by_owner(self, owner_id: str) -> int:
        """Return how many records an owner has."""
        return sum(1 for record in self.records.values() if record.owner_id == owner_id)
