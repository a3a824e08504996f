"""Pattern tokenizer.

A pattern is literal text mixed with bracketed placeholders such as
``{Y}`` or ``{#|6|y}``.  The body of a placeholder is split on ``|``: the
first part is the identifier, the rest are parameters.  Unbalanced braces
never raise; they simply stay in the output as literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

_TOKEN_RE = re.compile(r"\{([^|}]*?\|?.*?)\}")


@dataclass(frozen=True)
class Token:
    """One parsed placeholder of a pattern."""

    identifier: str
    parameters: tuple[str, ...]
    source: str
    reset_reference: datetime


def tokenize(pattern: str, reset_reference: datetime) -> list[Token]:
    """Split *pattern* into tokens in left-to-right order.

    Every token carries *reset_reference*, the instant the counter owning
    the pattern was last advanced.
    """
    tokens: list[Token] = []
    for match in _TOKEN_RE.finditer(pattern):
        identifier, *parameters = match.group(1).split("|")
        tokens.append(
            Token(
                identifier=identifier,
                parameters=tuple(parameters),
                source=match.group(0),
                reset_reference=reset_reference,
            )
        )
    return tokens
