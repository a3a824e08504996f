"""Built-in token handlers.

Supported tokens
----------------
``{#}``, ``{#|6}``, ``{#|6|y}``
    Counter value, optionally zero-padded and reset per period
    (``y`` year, ``m`` month, ``w`` ISO week, ``d`` day, ``h`` hour).
    Widths above ``MAX_WIDTH`` are clamped; a minus sign is not
    counted in the width.
``{Y}`` ``{y}`` ``{m}`` ``{M}`` ``{d}`` ``{D}`` ``{H}``
    Parts of the current UTC instant.
``{w}`` / ``{W}``
    Current ISO-8601 week number, two digits.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from seqnum.core.clock import Clock, as_utc, utc_now
from seqnum.core.errors import RESET_CONTEXTS, InvalidResetContextError
from seqnum.tokens.token import Token

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_DAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

MAX_WIDTH = 32


class TokenHandler(Protocol):
    """Capability implemented by every token handler, built-in or custom."""

    def handles(self, token: Token) -> bool:
        """Return True if this handler renders *token*."""
        ...

    def render(self, token: Token, counter_value: int) -> str:
        """Return the text that replaces *token* in the pattern."""
        ...

    def requests_reset(self, token: Token) -> bool:
        """Return True if the counter must restart before advancing."""
        ...


def _ensure_handles(handler: TokenHandler, token: Token) -> None:
    if not handler.handles(token):
        raise ValueError(
            f"Invalid token for {type(handler).__name__}: {token.identifier!r}"
        )


def _period_changed(context: str, last: datetime, now: datetime) -> bool:
    if context == "y":
        return last.year != now.year
    if context == "m":
        return last.year != now.year or last.month != now.month
    if context == "w":
        # ISO week number against the calendar year, not the ISO year.
        return last.isocalendar().week != now.isocalendar().week or last.year != now.year
    if context == "d":
        return last.date() != now.date()
    # "h"
    return last.date() != now.date() or last.hour != now.hour


class SequenceTokenHandler:
    """Handles ``{#}``: the counter value itself."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def handles(self, token: Token) -> bool:
        return token.identifier == "#"

    def render(self, token: Token, counter_value: int) -> str:
        _ensure_handles(self, token)
        width = 0
        if token.parameters:
            try:
                width = int(token.parameters[0])
            except ValueError:
                width = 0
        digits = str(abs(counter_value)).zfill(min(width, MAX_WIDTH))
        return f"-{digits}" if counter_value < 0 else digits

    def requests_reset(self, token: Token) -> bool:
        if len(token.parameters) < 2:
            return False

        context = token.parameters[1].lower()
        if context not in RESET_CONTEXTS:
            raise InvalidResetContextError(context)

        return _period_changed(context, as_utc(token.reset_reference), as_utc(self._clock()))


class DateTokenHandler:
    """Handles date tokens, rendered from the current instant."""

    _FORMATTERS: dict[str, Callable[[datetime], str]] = {
        "Y": lambda d: f"{d.year:04d}",
        "y": lambda d: f"{d.year % 100:02d}",
        "m": lambda d: f"{d.month:02d}",
        "M": lambda d: _MONTH_ABBR[d.month - 1],
        "d": lambda d: f"{d.day:02d}",
        "D": lambda d: _DAY_ABBR[d.weekday()],
        "H": lambda d: f"{d.hour:02d}",
    }

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def handles(self, token: Token) -> bool:
        return token.identifier in self._FORMATTERS

    def render(self, token: Token, counter_value: int) -> str:  # noqa: ARG002
        _ensure_handles(self, token)
        return self._FORMATTERS[token.identifier](as_utc(self._clock()))

    def requests_reset(self, token: Token) -> bool:  # noqa: ARG002
        return False


class WeekTokenHandler:
    """Handles ``{w}`` and ``{W}``: the ISO week of the current instant."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def handles(self, token: Token) -> bool:
        return token.identifier in ("w", "W")

    def render(self, token: Token, counter_value: int) -> str:  # noqa: ARG002
        _ensure_handles(self, token)
        return f"{as_utc(self._clock()).isocalendar().week:02d}"

    def requests_reset(self, token: Token) -> bool:  # noqa: ARG002
        return False
