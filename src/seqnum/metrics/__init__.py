"""Prometheus metrics for seqnum."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# Generation
NUMBERS_GENERATED = Counter(
    "seqnum_numbers_generated_total", "Total numbers generated", ["key"]
)
GENERATION_DURATION = Histogram(
    "seqnum_generation_duration_seconds",
    "Time spent generating one number",
    ["key"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1),
)

# Counter store
COUNTERS_CREATED = Counter("seqnum_counters_created_total", "Counters created", ["key"])
COUNTER_RESETS = Counter("seqnum_counter_resets_total", "Counter period resets", ["key"])
COUNTER_CONFLICTS = Counter(
    "seqnum_counter_conflicts_total", "Version conflicts while advancing", ["key"]
)

__all__ = [
    "NUMBERS_GENERATED",
    "GENERATION_DURATION",
    "COUNTERS_CREATED",
    "COUNTER_RESETS",
    "COUNTER_CONFLICTS",
]
