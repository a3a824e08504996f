"""Unit of work for numbering many records together."""

from __future__ import annotations

from seqnum.core.models import CounterRecord


class Batch:
    """Pins one counter instance per (key, segment) for the batch's lifetime.

    Repeated requests for the same counter reuse the pinned instance instead
    of fetching it again, so N requests yield N consecutive values.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, str | None], CounterRecord] = {}

    def get(self, key: str, segment: str | None) -> CounterRecord | None:
        return self._records.get((key, segment))

    def add(self, record: CounterRecord) -> CounterRecord:
        """Pin *record* unless its counter is already pinned; return the pinned one."""
        return self._records.setdefault(record.identity, record)

    def __contains__(self, identity: object) -> bool:
        return identity in self._records

    def __len__(self) -> int:
        return len(self._records)
