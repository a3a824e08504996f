"""Tests for core Pydantic models: validation and serialization round-trips."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from seqnum.core.models import (
    DEFAULT_PATTERN,
    CounterRecord,
    SegmentOverride,
    SequenceConfig,
    Settings,
)

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


def _round_trip(model):
    """Dump to JSON and parse back; return the reconstituted object."""
    json_str = model.model_dump_json()
    return type(model).model_validate_json(json_str)


class TestSequenceConfig:
    def test_defaults(self):
        config = SequenceConfig(key="invoice")
        assert config.pattern == DEFAULT_PATTERN
        assert config.initial_value == 0
        assert config.segment is None
        assert config.segments == ()

    def test_round_trip_with_overrides(self):
        config = SequenceConfig(
            key="document",
            pattern="DOC-{#|6}",
            initial_value=100,
            segment="{DocumentType}",
            segments=(
                SegmentOverride(value="OFFER", pattern="AG-{#|4}"),
                SegmentOverride(value="ORDER", pattern="KV-{#|4}"),
            ),
        )
        assert _round_trip(config) == config

    def test_empty_key_rejected(self):
        with pytest.raises(ValidationError):
            SequenceConfig(key="")

    def test_frozen(self):
        config = SequenceConfig(key="invoice")
        with pytest.raises(ValidationError):
            config.pattern = "X-{#}"


class TestCounterRecord:
    def test_round_trip(self):
        record = CounterRecord(
            key="invoice",
            segment="EU",
            pattern="IV{Y}-{#|6|y}",
            current_value=41,
            last_advanced_at=NOW,
            version=41,
        )
        assert _round_trip(record) == record

    def test_identity(self):
        assert CounterRecord(key="k").identity == ("k", None)
        assert CounterRecord(key="k", segment="S").identity == ("k", "S")

    def test_default_timestamp_is_aware_utc(self):
        record = CounterRecord(key="k")
        assert record.last_advanced_at.utcoffset().total_seconds() == 0


class TestSettings:
    def test_defaults(self):
        assert Settings().max_retries == 5

    def test_retries_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(max_retries=0)
