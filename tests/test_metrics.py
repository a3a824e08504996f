"""Tests for Prometheus metrics."""

from __future__ import annotations

from datetime import UTC, datetime

from prometheus_client import REGISTRY

from seqnum.core.generator import NumberGenerator
from seqnum.core.models import SequenceConfig
from seqnum.metrics import (
    COUNTER_CONFLICTS,
    COUNTER_RESETS,
    COUNTERS_CREATED,
    GENERATION_DURATION,
    NUMBERS_GENERATED,
)
from seqnum.store.memory import InMemoryCounterStore
from seqnum.tokens.registry import default_registry


def _sample(name: str, key: str) -> float:
    return REGISTRY.get_sample_value(name, {"key": key}) or 0.0


class TestMetricsDefinitions:
    def test_labels_accept_key(self) -> None:
        NUMBERS_GENERATED.labels(key="defs").inc()
        GENERATION_DURATION.labels(key="defs").observe(0.002)
        COUNTERS_CREATED.labels(key="defs").inc()
        COUNTER_RESETS.labels(key="defs").inc()
        COUNTER_CONFLICTS.labels(key="defs").inc()


class TestMetricsServer:
    def test_start_metrics_server_import(self) -> None:
        from seqnum.metrics.server import start_metrics_server

        assert callable(start_metrics_server)


class TestMetricsInRegistry:
    def test_metrics_registered(self) -> None:
        metric_names = [m.name for m in REGISTRY.collect()]

        # Counters don't have the _total suffix in the name attribute
        assert "seqnum_numbers_generated" in metric_names
        assert "seqnum_generation_duration_seconds" in metric_names
        assert "seqnum_counters_created" in metric_names
        assert "seqnum_counter_resets" in metric_names
        assert "seqnum_counter_conflicts" in metric_names


class TestGenerationIsCounted:
    async def test_generate_updates_counters(self, clock) -> None:
        key = "metrics-generate"
        before_numbers = _sample("seqnum_numbers_generated_total", key)
        before_created = _sample("seqnum_counters_created_total", key)

        gen = NumberGenerator(InMemoryCounterStore(clock=clock), default_registry(clock))
        config = SequenceConfig(key=key, pattern="{#}")
        await gen.generate(config)
        await gen.generate(config)

        assert _sample("seqnum_numbers_generated_total", key) == before_numbers + 2
        assert _sample("seqnum_counters_created_total", key) == before_created + 1
        assert _sample("seqnum_generation_duration_seconds_count", key) >= 2

    async def test_reset_is_counted(self, clock) -> None:
        key = "metrics-reset"
        before = _sample("seqnum_counter_resets_total", key)

        gen = NumberGenerator(InMemoryCounterStore(clock=clock), default_registry(clock))
        config = SequenceConfig(key=key, pattern="{#|3|y}")
        await gen.generate(config)
        clock.set(datetime(2026, 1, 1, tzinfo=UTC))
        assert await gen.generate(config) == "001"

        assert _sample("seqnum_counter_resets_total", key) == before + 1
