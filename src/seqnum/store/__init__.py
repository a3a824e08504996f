"""Counter stores: persistence for (key, segment) counters."""

from seqnum.store.base import CounterStore, ResetCheck, VersionedCounterStore
from seqnum.store.json_file import JsonCounterStore
from seqnum.store.memory import InMemoryCounterStore

__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "JsonCounterStore",
    "ResetCheck",
    "VersionedCounterStore",
]
