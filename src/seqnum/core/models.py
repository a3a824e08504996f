"""Core domain models for seqnum.

Sequence definitions are immutable Pydantic models supplied by the caller.
Counter records are owned by a counter store and only change through its
``advance`` operation.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from seqnum.core.clock import utc_now

DEFAULT_PATTERN = "{#}"

# ---------------------------------------------------------------------------
# Sequence definitions
# ---------------------------------------------------------------------------


class SegmentOverride(BaseModel):
    """Pattern used instead of the sequence default for one segment value."""

    model_config = ConfigDict(frozen=True)

    value: str
    pattern: str


class SequenceConfig(BaseModel):
    """Definition of one family of counters.

    ``segment`` is either a static string or an expression containing
    ``{FieldName}`` placeholders that are filled from the record being
    numbered.  Every distinct resolved value gets its own counter.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    pattern: str = DEFAULT_PATTERN
    initial_value: int = 0
    segment: str | None = None
    segments: tuple[SegmentOverride, ...] = ()


# ---------------------------------------------------------------------------
# Persisted counters
# ---------------------------------------------------------------------------


class CounterRecord(BaseModel):
    """Persisted state of a single (key, segment) counter."""

    key: str
    segment: str | None = None
    pattern: str = DEFAULT_PATTERN
    current_value: int = 0
    last_advanced_at: datetime = Field(default_factory=utc_now)
    version: int = 0

    @property
    def identity(self) -> tuple[str, str | None]:
        return (self.key, self.segment)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """Tunable settings loaded from the ``settings`` section of the config."""

    store_path: str = ".seqnum/counters.json"
    max_retries: int = Field(default=5, ge=1)
