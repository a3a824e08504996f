"""Ordered token handler registry.

Handlers are consulted in registration order and the first one that
handles a token owns it, both for the reset check and for rendering.
Tokens no handler claims are left in the output unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable

from seqnum.core.clock import Clock, utc_now
from seqnum.tokens.handlers import (
    DateTokenHandler,
    SequenceTokenHandler,
    TokenHandler,
    WeekTokenHandler,
)
from seqnum.tokens.token import Token


class TokenHandlerRegistry:
    """Keeps token handlers in order and dispatches tokens to them."""

    def __init__(self, handlers: Iterable[TokenHandler] = ()) -> None:
        self._handlers: list[TokenHandler] = list(handlers)

    @property
    def handlers(self) -> tuple[TokenHandler, ...]:
        return tuple(self._handlers)

    def register(self, handler: TokenHandler) -> None:
        """Append *handler*; it only sees tokens no earlier handler claims."""
        self._handlers.append(handler)

    def find(self, token: Token) -> TokenHandler | None:
        for handler in self._handlers:
            if handler.handles(token):
                return handler
        return None

    def requests_reset(self, tokens: Iterable[Token]) -> bool:
        """Return True as soon as one token's handler asks for a reset.

        Raises:
            InvalidResetContextError: If a counter token names an unknown period.
        """
        for token in tokens:
            handler = self.find(token)
            if handler is not None and handler.requests_reset(token):
                return True
        return False

    def validate(self, tokens: Iterable[Token]) -> None:
        """Ask every handled token for its reset decision so bad parameters raise.

        Unlike :meth:`requests_reset` this never stops early.
        """
        for token in tokens:
            handler = self.find(token)
            if handler is not None:
                handler.requests_reset(token)

    def render(self, tokens: Iterable[Token], pattern: str, counter_value: int) -> str:
        """Replace every handled token of *pattern* with its rendered value."""
        result = pattern
        for token in tokens:
            handler = self.find(token)
            if handler is None:
                continue
            result = result.replace(token.source, handler.render(token, counter_value))
        return result


def default_registry(
    clock: Clock = utc_now, extra: Iterable[TokenHandler] = ()
) -> TokenHandlerRegistry:
    """Build a registry with the built-in handlers followed by *extra*."""
    registry = TokenHandlerRegistry(
        [
            SequenceTokenHandler(clock),
            DateTokenHandler(clock),
            WeekTokenHandler(clock),
        ]
    )
    for handler in extra:
        registry.register(handler)
    return registry
