"""Shared fixtures: a controllable clock so date tokens and resets are deterministic."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest


class FrozenClock:
    """Callable clock returning a fixed instant until moved."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 6, 15, 12, 30, 0, tzinfo=UTC))
