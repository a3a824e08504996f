"""In-process counter store."""

from __future__ import annotations

import anyio

from seqnum.core.clock import Clock, utc_now
from seqnum.core.models import CounterRecord
from seqnum.store.base import VersionedCounterStore


class InMemoryCounterStore(VersionedCounterStore):
    """Counter store backed by a dict; state lives as long as the instance."""

    def __init__(self, max_retries: int = 5, clock: Clock = utc_now) -> None:
        super().__init__(max_retries=max_retries, clock=clock)
        self._counters: dict[tuple[str, str | None], CounterRecord] = {}
        self._lock = anyio.Lock()

    async def _load(self, key: str, segment: str | None) -> CounterRecord | None:
        async with self._lock:
            stored = self._counters.get((key, segment))
            return stored.model_copy() if stored is not None else None

    async def _insert(self, record: CounterRecord) -> bool:
        async with self._lock:
            if record.identity in self._counters:
                return False
            self._counters[record.identity] = record.model_copy()
            return True

    async def _compare_and_swap(self, expected_version: int, record: CounterRecord) -> bool:
        async with self._lock:
            stored = self._counters.get(record.identity)
            if stored is None or stored.version != expected_version:
                return False
            self._counters[record.identity] = record.model_copy()
            return True

    async def _load_all(self) -> list[CounterRecord]:
        async with self._lock:
            return [r.model_copy() for r in self._counters.values()]
