"""Counter store contract and the optimistic-locking advance protocol."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from seqnum.core.clock import Clock, utc_now
from seqnum.core.errors import CounterConflictError, CounterStoreError
from seqnum.core.models import CounterRecord
from seqnum.metrics import COUNTER_CONFLICTS, COUNTER_RESETS, COUNTERS_CREATED

logger = logging.getLogger(__name__)

ResetCheck = Callable[[CounterRecord], bool]


class CounterStore(Protocol):
    """Persistence boundary for counter records.

    Records handed out are detached copies; the only way to change a
    persisted counter is :meth:`advance`.
    """

    async def get_or_create(
        self, key: str, segment: str | None, pattern: str, initial_value: int
    ) -> CounterRecord:
        """Return the (key, segment) counter, creating it if it does not exist."""
        ...

    async def advance(
        self,
        record: CounterRecord,
        initial_value: int,
        reset_to: int | None = None,
        reset_check: ResetCheck | None = None,
    ) -> int:
        """Atomically advance *record* and return the new value."""
        ...

    async def list_counters(self, key: str | None = None) -> list[CounterRecord]:
        """Return every stored counter, optionally limited to one key."""
        ...


def next_state(
    record: CounterRecord, initial_value: int, reset_to: int | None, now: datetime
) -> CounterRecord:
    """Compute the record that results from advancing *record* once."""
    current = record.current_value if reset_to is None else reset_to
    return record.model_copy(
        update={
            "current_value": max(current, initial_value) + 1,
            "last_advanced_at": now,
            "version": record.version + 1,
        }
    )


def _copy_into(target: CounterRecord, source: CounterRecord) -> None:
    target.pattern = source.pattern
    target.current_value = source.current_value
    target.last_advanced_at = source.last_advanced_at
    target.version = source.version


class VersionedCounterStore(ABC):
    """Implements the store contract on top of three storage primitives.

    Subclasses provide load, insert-if-absent and compare-and-swap on the
    record version.  Conflicts are retried here after refreshing from
    storage, re-deciding the reset against the refreshed record.
    """

    def __init__(self, max_retries: int = 5, clock: Clock = utc_now) -> None:
        self._max_retries = max_retries
        self._clock = clock

    # -- Storage primitives ---------------------------------------------------

    @abstractmethod
    async def _load(self, key: str, segment: str | None) -> CounterRecord | None:
        """Return a detached copy of the stored record, or None."""

    @abstractmethod
    async def _insert(self, record: CounterRecord) -> bool:
        """Store *record* unless its (key, segment) exists; return True if stored."""

    @abstractmethod
    async def _compare_and_swap(self, expected_version: int, record: CounterRecord) -> bool:
        """Replace the stored record if its version is still *expected_version*."""

    @abstractmethod
    async def _load_all(self) -> list[CounterRecord]:
        """Return detached copies of every stored record."""

    # -- Public API -----------------------------------------------------------

    async def get_or_create(
        self, key: str, segment: str | None, pattern: str, initial_value: int
    ) -> CounterRecord:
        stored = await self._load(key, segment)
        if stored is not None:
            return stored

        record = CounterRecord(
            key=key,
            segment=segment,
            pattern=pattern,
            current_value=initial_value,
            last_advanced_at=self._clock(),
        )
        if await self._insert(record):
            COUNTERS_CREATED.labels(key=key).inc()
            logger.info("Created counter %s (segment=%r) with pattern %s", key, segment, pattern)
            return record.model_copy()

        # Another caller created it first.
        stored = await self._load(key, segment)
        if stored is None:
            raise CounterStoreError(f"Counter '{key}' (segment={segment!r}) vanished after insert")
        return stored

    async def advance(
        self,
        record: CounterRecord,
        initial_value: int,
        reset_to: int | None = None,
        reset_check: ResetCheck | None = None,
    ) -> int:
        requested_reset = reset_to
        working = record.model_copy()

        for attempt in range(1, self._max_retries + 1):
            updated = next_state(working, initial_value, reset_to, self._clock())
            if await self._compare_and_swap(working.version, updated):
                if reset_to is not None:
                    COUNTER_RESETS.labels(key=record.key).inc()
                    logger.info(
                        "Reset counter %s (segment=%r) to %d", record.key, record.segment, reset_to
                    )
                logger.debug(
                    "Advanced counter %s (segment=%r) to %d",
                    record.key,
                    record.segment,
                    updated.current_value,
                )
                # A batch may share this instance across concurrent callers.
                if updated.version > record.version:
                    _copy_into(record, updated)
                return updated.current_value

            COUNTER_CONFLICTS.labels(key=record.key).inc()
            logger.warning(
                "Version conflict on counter %s (segment=%r), attempt %d/%d",
                record.key,
                record.segment,
                attempt,
                self._max_retries,
            )
            stored = await self._load(record.key, record.segment)
            if stored is None:
                raise CounterStoreError(
                    f"Counter '{record.key}' (segment={record.segment!r}) is not stored"
                )
            working = stored
            if requested_reset is not None and reset_check is not None:
                reset_to = requested_reset if reset_check(working) else None

        raise CounterConflictError(record.key, record.segment, self._max_retries)

    async def list_counters(self, key: str | None = None) -> list[CounterRecord]:
        records = await self._load_all()
        if key is not None:
            records = [r for r in records if r.key == key]
        return sorted(records, key=lambda r: (r.key, r.segment is not None, r.segment or ""))
