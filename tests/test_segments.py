"""Tests for segment resolution and field access."""

from dataclasses import dataclass

import pytest

from seqnum.core.errors import FieldWriteError, UnknownFieldError
from seqnum.core.fields import FieldAccessor
from seqnum.core.models import SegmentOverride, SequenceConfig
from seqnum.core.segments import SegmentResolver


@dataclass
class Order:
    order_type: str | None = "OFFER"
    region: str = "EU"
    number: str | None = None


@dataclass(frozen=True)
class FrozenOrder:
    number: str | None = None


OFFER = SegmentOverride(value="OFFER", pattern="AG-{#|4}")
ORDER = SegmentOverride(value="ORDER", pattern="KV-{#|4}")


class TestResolveSegmentValue:
    def test_no_segment_returns_none(self):
        config = SequenceConfig(key="test")
        assert SegmentResolver().resolve_segment_value(Order(), config) is None

    def test_empty_segment_returns_none(self):
        config = SequenceConfig(key="test", segment="")
        assert SegmentResolver().resolve_segment_value(Order(), config) is None

    def test_static_segment(self):
        config = SequenceConfig(key="test", segment="FIXED")
        assert SegmentResolver().resolve_segment_value(Order(), config) == "FIXED"

    def test_field_reference(self):
        config = SequenceConfig(key="test", segment="{order_type}")
        assert SegmentResolver().resolve_segment_value(Order(order_type="ORDER"), config) == "ORDER"

    def test_mixed_expression(self):
        config = SequenceConfig(key="test", segment="{region}-{order_type}/x")
        assert SegmentResolver().resolve_segment_value(Order(), config) == "EU-OFFER/x"

    def test_none_field_value_becomes_empty_string(self):
        config = SequenceConfig(key="test", segment="T{order_type}")
        assert SegmentResolver().resolve_segment_value(Order(order_type=None), config) == "T"

    def test_non_string_value_is_stringified(self):
        config = SequenceConfig(key="test", segment="S{supplier}")
        assert SegmentResolver().resolve_segment_value({"supplier": 42}, config) == "S42"

    def test_unknown_field_raises(self):
        config = SequenceConfig(key="test", segment="{missing}")
        with pytest.raises(UnknownFieldError, match="missing") as exc_info:
            SegmentResolver().resolve_segment_value(Order(), config)
        assert exc_info.value.field == "missing"
        assert exc_info.value.record_type == "Order"


class TestResolveOverride:
    def test_matching_override(self):
        config = SequenceConfig(key="order", segments=(OFFER, ORDER))
        assert SegmentResolver.resolve_override(config, "ORDER") == ORDER

    def test_non_matching_override(self):
        config = SequenceConfig(key="order", segments=(OFFER,))
        assert SegmentResolver.resolve_override(config, "INVOICE") is None

    def test_no_overrides(self):
        config = SequenceConfig(key="test")
        assert SegmentResolver.resolve_override(config, "anything") is None

    def test_none_segment_value(self):
        config = SequenceConfig(key="order", segments=(OFFER,))
        assert SegmentResolver.resolve_override(config, None) is None

    def test_duplicate_values_first_wins(self):
        duplicate = SegmentOverride(value="OFFER", pattern="SECOND-{#}")
        config = SequenceConfig(key="order", segments=(OFFER, duplicate))
        assert SegmentResolver.resolve_override(config, "OFFER") == OFFER


class TestFieldAccessor:
    def test_get_attribute_and_key(self):
        accessor = FieldAccessor()
        assert accessor.get(Order(), "region") == "EU"
        assert accessor.get({"region": "US"}, "region") == "US"

    def test_get_missing_key(self):
        with pytest.raises(UnknownFieldError):
            FieldAccessor().get({}, "region")

    def test_set_attribute_and_key(self):
        accessor = FieldAccessor()
        order = Order()
        record = {"number": None}
        accessor.set(order, "number", "A-1")
        accessor.set(record, "number", "A-2")
        assert order.number == "A-1"
        assert record["number"] == "A-2"

    def test_set_unknown_attribute(self):
        with pytest.raises(UnknownFieldError):
            FieldAccessor().set(Order(), "nope", "x")

    def test_set_frozen_record(self):
        with pytest.raises(FieldWriteError):
            FieldAccessor().set(FrozenOrder(), "number", "x")
