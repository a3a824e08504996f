"""Exception hierarchy for number generation."""

from __future__ import annotations

RESET_CONTEXTS = ("y", "m", "w", "d", "h")


class NumberingError(Exception):
    """Base class for every error raised by seqnum."""


class ConfigError(NumberingError):
    """Raised when a numbering config file holds an invalid definition."""


class InvalidResetContextError(NumberingError, ValueError):
    """Raised when a counter token names an unknown reset period."""

    def __init__(self, context: str) -> None:
        self.context = context
        super().__init__(
            f"Cannot reset on period '{context}'. Allowed: {', '.join(RESET_CONTEXTS)}"
        )


class UnknownFieldError(NumberingError, LookupError):
    """Raised when a record has no field with the requested name."""

    def __init__(self, field: str, record_type: str) -> None:
        self.field = field
        self.record_type = record_type
        super().__init__(f"Field '{field}' not found on '{record_type}'")


class FieldWriteError(NumberingError):
    """Raised when a generated number cannot be written back to its record.

    The counter has already advanced when this is raised, so retrying the
    whole assignment burns another value.
    """


class CounterStoreError(NumberingError):
    """Raised when the counter store cannot read or persist a counter."""


class CounterConflictError(CounterStoreError):
    """Raised when an advance keeps losing the version check."""

    def __init__(self, key: str, segment: str | None, attempts: int) -> None:
        self.key = key
        self.segment = segment
        self.attempts = attempts
        super().__init__(
            f"Counter '{key}' (segment={segment!r}) still conflicting after {attempts} attempts"
        )
