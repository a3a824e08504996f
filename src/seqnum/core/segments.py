"""Segment resolution.

A segment expression such as ``"{DocumentType}"`` or ``"EU-{Region}"`` is
filled in from the record being numbered.  The resolved value selects the
counter and, when it equals a configured override, the pattern used to
create that counter.
"""

from __future__ import annotations

import re
from typing import Any

from seqnum.core.fields import FieldAccessor
from seqnum.core.models import SegmentOverride, SequenceConfig

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class SegmentResolver:
    def __init__(self, accessor: FieldAccessor | None = None) -> None:
        self._accessor = accessor or FieldAccessor()

    def resolve_segment_value(self, record: Any, config: SequenceConfig) -> str | None:
        """Return the segment value for *record*, or None for unsegmented sequences.

        Raises:
            UnknownFieldError: If a placeholder names a field *record* lacks.
        """
        if not config.segment:
            return None

        def _substitute(match: re.Match[str]) -> str:
            value = self._accessor.get(record, match.group(1))
            return "" if value is None else str(value)

        return _PLACEHOLDER_RE.sub(_substitute, config.segment)

    @staticmethod
    def resolve_override(
        config: SequenceConfig, segment_value: str | None
    ) -> SegmentOverride | None:
        """Return the first override whose value equals *segment_value*."""
        if segment_value is None or not config.segments:
            return None
        for override in config.segments:
            if override.value == segment_value:
                return override
        return None
