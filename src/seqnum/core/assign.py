"""Assign generated numbers to records.

:class:`SequenceCatalog` is the explicit registry of which field of which
record type is numbered by which sequence.  :class:`NumberAssigner` walks a
group of new records, fills every empty numbered field and leaves values
that are already set alone.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from seqnum.core.batch import Batch
from seqnum.core.fields import FieldAccessor
from seqnum.core.generator import NumberGenerator
from seqnum.core.models import SequenceConfig

logger = logging.getLogger(__name__)


class SequenceCatalog:
    """Maps record types to their numbered fields."""

    def __init__(self) -> None:
        self._fields: dict[type, list[tuple[str, SequenceConfig]]] = {}

    def register(self, record_type: type, field: str, config: SequenceConfig) -> None:
        entries = self._fields.setdefault(record_type, [])
        if any(name == field for name, _ in entries):
            raise ValueError(f"Field '{field}' of {record_type.__name__} is already registered")
        entries.append((field, config))

    def fields_for(self, record: Any) -> list[tuple[str, SequenceConfig]]:
        """Return (field, config) pairs for *record*, base classes included."""
        fields: list[tuple[str, SequenceConfig]] = []
        for cls in type(record).__mro__:
            fields.extend(self._fields.get(cls, ()))
        return fields


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


class NumberAssigner:
    def __init__(
        self,
        generator: NumberGenerator,
        catalog: SequenceCatalog,
        accessor: FieldAccessor | None = None,
    ) -> None:
        self._generator = generator
        self._catalog = catalog
        self._accessor = accessor or FieldAccessor()

    async def assign(self, records: Iterable[Any]) -> int:
        """Number every empty registered field of *records* in one batch.

        Returns the number of fields that received a value.

        Raises:
            UnknownFieldError: If a registered or segment field is missing.
            FieldWriteError: If writing a generated value back fails.  The
                counter has already advanced at that point.
        """
        batch = Batch()
        assigned = 0
        for record in records:
            for field, config in self._catalog.fields_for(record):
                if not _is_empty(self._accessor.get(record, field)):
                    continue
                number = await self._generator.generate_for(config, record, batch)
                self._accessor.set(record, field, number)
                assigned += 1

        if assigned:
            logger.info("Assigned %d numbers across %d counters", assigned, len(batch))
        return assigned
