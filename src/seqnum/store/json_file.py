"""Counter store persisted to a single JSON file.

Writes go through a temp file, fsync and ``os.replace`` so a crash never
leaves a half-written file behind.  The previous versions are kept as
``.bak.N`` rotations.  Every read-compare-write holds a lock on a sidecar
``.lock`` file, so several processes can share one counter file.

A corrupt or malformed counter file is never replaced by an older backup:
that would hand out numbers again.  The only automatic recovery is the
interrupted-write case where the file is gone and ``.bak.1`` holds the last
committed state.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import anyio
import anyio.to_thread
from filelock import FileLock, Timeout
from pydantic import ValidationError

from seqnum.core.clock import Clock, utc_now
from seqnum.core.errors import CounterStoreError
from seqnum.core.models import CounterRecord
from seqnum.store.base import VersionedCounterStore

logger = logging.getLogger(__name__)

_MAX_BACKUPS = 3

_Counters = dict[tuple[str, str | None], CounterRecord]
T = TypeVar("T")


class JsonCounterStore(VersionedCounterStore):
    """Atomic JSON counter store with backup rotation and a cross-process lock."""

    def __init__(
        self,
        path: Path,
        max_retries: int = 5,
        clock: Clock = utc_now,
        lock_timeout: float = 10.0,
    ) -> None:
        super().__init__(max_retries=max_retries, clock=clock)
        self._path = path
        self._lock = anyio.Lock()
        self._file_lock = FileLock(str(path.parent / f"{path.name}.lock"), timeout=lock_timeout)

    @property
    def path(self) -> Path:
        return self._path

    # -- Storage primitives ---------------------------------------------------

    async def _load(self, key: str, segment: str | None) -> CounterRecord | None:
        return await self._run(lambda counters: counters.get((key, segment)))

    async def _insert(self, record: CounterRecord) -> bool:
        def _apply(counters: _Counters) -> bool:
            if record.identity in counters:
                return False
            counters[record.identity] = record.model_copy()
            self._write_counters(counters)
            return True

        return await self._run(_apply)

    async def _compare_and_swap(self, expected_version: int, record: CounterRecord) -> bool:
        def _apply(counters: _Counters) -> bool:
            stored = counters.get(record.identity)
            if stored is None or stored.version != expected_version:
                return False
            counters[record.identity] = record.model_copy()
            self._write_counters(counters)
            return True

        return await self._run(_apply)

    async def _load_all(self) -> list[CounterRecord]:
        return await self._run(lambda counters: list(counters.values()))

    # -- File handling --------------------------------------------------------

    async def _run(self, operation: Callable[[_Counters], T]) -> T:
        async with self._lock:
            return await anyio.to_thread.run_sync(self._locked, operation)

    def _locked(self, operation: Callable[[_Counters], T]) -> T:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_lock:
                return operation(self._read_counters())
        except Timeout as e:
            raise CounterStoreError(f"Timed out waiting for lock on {self._path}") from e
        except OSError as e:
            raise CounterStoreError(f"Cannot access counters in {self._path}: {e}") from e

    def _backup(self, n: int) -> Path:
        return self._path.parent / f"{self._path.name}.bak.{n}"

    def _read_counters(self) -> _Counters:
        """Load counters; must be called with the file lock held."""
        if self._path.exists():
            counters = self._parse(self._path)
            if counters is None:
                newest = next(
                    (b for b in map(self._backup, range(1, _MAX_BACKUPS + 1)) if b.exists()),
                    None,
                )
                hint = f"newest backup is {newest}" if newest else "no backup available"
                raise CounterStoreError(
                    f"Counter file {self._path} is corrupt or malformed ({hint}); "
                    "restore it manually"
                )
            return counters

        # A write was interrupted between rotating the file away and
        # moving the new one in; .bak.1 is the last committed state.
        first = self._backup(1)
        if first.exists():
            counters = self._parse(first)
            if counters is None:
                raise CounterStoreError(
                    f"Counter file {self._path} is missing and backup {first} is corrupt"
                )
            logger.warning("Counter file %s missing; recovered from %s", self._path, first)
            return counters

        orphans = [b for b in map(self._backup, range(2, _MAX_BACKUPS + 1)) if b.exists()]
        if orphans:
            raise CounterStoreError(
                f"Counter file {self._path} is missing but older backups exist ({orphans[0]})"
            )
        return {}

    @staticmethod
    def _parse(path: Path) -> _Counters | None:
        """Return the counters in *path*, or None when the content is unusable."""
        raw = path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except ValueError:
            logger.error("Counter file %s is not valid JSON", path)
            return None
        if not isinstance(data, list):
            logger.error("Counter file %s does not contain a list", path)
            return None
        try:
            records = [CounterRecord.model_validate(item) for item in data]
        except ValidationError:
            logger.error("Counter file %s contains malformed records", path)
            return None
        return {r.identity: r for r in records}

    def _write_counters(self, counters: _Counters) -> None:
        """Persist *counters*; must be called with the file lock held."""
        path = self._path
        content = json.dumps(
            [r.model_dump(mode="json") for r in counters.values()], indent=2, ensure_ascii=False
        )

        # .bak.3 is dropped, .bak.2 -> .bak.3, .bak.1 -> .bak.2, file -> .bak.1
        for i in range(_MAX_BACKUPS, 1, -1):
            src = self._backup(i - 1)
            if src.exists():
                os.replace(src, self._backup(i))
        if path.exists():
            os.replace(path, self._backup(1))

        tmp_path = path.parent / f"{path.name}.{os.getpid()}.tmp"
        fd = os.open(str(tmp_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
        try:
            os.write(fd, content.encode("utf-8"))
            os.fsync(fd)
        finally:
            os.close(fd)
        os.replace(tmp_path, path)
