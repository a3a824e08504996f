"""Read and write named fields on records.

Records are either plain objects (attributes) or mappings (keys).
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from seqnum.core.errors import FieldWriteError, UnknownFieldError


class FieldAccessor:
    """Get/set-by-name access used for segment resolution and write-back."""

    def get(self, record: Any, name: str) -> Any:
        if isinstance(record, Mapping):
            try:
                return record[name]
            except KeyError:
                raise UnknownFieldError(name, type(record).__name__) from None
        try:
            return getattr(record, name)
        except AttributeError:
            raise UnknownFieldError(name, type(record).__name__) from None

    def set(self, record: Any, name: str, value: Any) -> None:
        if isinstance(record, MutableMapping):
            record[name] = value
            return
        if isinstance(record, Mapping):
            raise FieldWriteError(
                f"Cannot set '{name}' on read-only mapping '{type(record).__name__}'"
            )
        if not hasattr(record, name):
            raise UnknownFieldError(name, type(record).__name__)
        try:
            setattr(record, name, value)
        except (AttributeError, TypeError, ValueError) as e:
            raise FieldWriteError(
                f"Cannot set '{name}' on '{type(record).__name__}': {e}"
            ) from e
