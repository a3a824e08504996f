"""Number generation engine.

Given a sequence definition and a resolved segment, the generator fetches
(or creates) the matching counter, decides whether the counter's pattern
asks for a period reset, advances the counter through the store and renders
the pattern with the new value.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from seqnum.core.batch import Batch
from seqnum.core.clock import utc_now
from seqnum.core.models import CounterRecord, SegmentOverride, SequenceConfig
from seqnum.core.segments import SegmentResolver
from seqnum.metrics import GENERATION_DURATION, NUMBERS_GENERATED
from seqnum.store.base import CounterStore
from seqnum.tokens.registry import TokenHandlerRegistry, default_registry
from seqnum.tokens.token import Token, tokenize

logger = logging.getLogger(__name__)


class NumberGenerator:
    """Produces formatted numbers from sequence definitions.

    The generator holds no counter state of its own; pass a :class:`Batch`
    to keep counters pinned across several calls in one unit of work.
    """

    def __init__(
        self,
        store: CounterStore,
        registry: TokenHandlerRegistry | None = None,
        resolver: SegmentResolver | None = None,
    ) -> None:
        self._store = store
        self._registry = registry or default_registry()
        self._resolver = resolver or SegmentResolver()

    @property
    def registry(self) -> TokenHandlerRegistry:
        return self._registry

    # -- Public API -------------------------------------------------------

    async def generate(
        self,
        config: SequenceConfig,
        segment_value: str | None = None,
        override: SegmentOverride | None = None,
        batch: Batch | None = None,
    ) -> str:
        """Advance the counter for (config.key, segment_value) and render it.

        Raises:
            InvalidResetContextError: If the counter's pattern names an
                unknown reset period.  No counter is created or advanced.
            CounterStoreError: If the store cannot persist the advance.
        """
        started = time.perf_counter()
        # Reject bad patterns before any counter is created.
        self._validate(config.pattern)
        if segment_value is not None and override is not None:
            self._validate(override.pattern)

        counter = await self._get_or_create(config, segment_value, override, batch)

        tokens = tokenize(counter.pattern, counter.last_advanced_at)
        reset_to = config.initial_value if self.check_for_reset(tokens) else None

        value = await self._store.advance(
            counter,
            config.initial_value,
            reset_to=reset_to,
            reset_check=self._reset_check,
        )
        number = self.replace(tokens, counter.pattern, value)

        NUMBERS_GENERATED.labels(key=config.key).inc()
        GENERATION_DURATION.labels(key=config.key).observe(time.perf_counter() - started)
        logger.debug("Generated %s for %s (segment=%r)", number, config.key, segment_value)
        return number

    async def generate_for(
        self, config: SequenceConfig, record: Any, batch: Batch | None = None
    ) -> str:
        """Resolve the segment of *record* and generate its next number.

        Raises:
            UnknownFieldError: If the segment expression references a field
                *record* does not have.  No counter is touched.
        """
        segment_value = self._resolver.resolve_segment_value(record, config)
        override = self._resolver.resolve_override(config, segment_value)
        return await self.generate(config, segment_value, override, batch)

    def check_for_reset(self, tokens: list[Token]) -> bool:
        return self._registry.requests_reset(tokens)

    def replace(self, tokens: list[Token], pattern: str, value: int) -> str:
        return self._registry.render(tokens, pattern, value)

    # -- Internals --------------------------------------------------------

    def _validate(self, pattern: str) -> None:
        self._registry.validate(tokenize(pattern, utc_now()))

    def _reset_check(self, record: CounterRecord) -> bool:
        return self.check_for_reset(tokenize(record.pattern, record.last_advanced_at))

    async def _get_or_create(
        self,
        config: SequenceConfig,
        segment_value: str | None,
        override: SegmentOverride | None,
        batch: Batch | None,
    ) -> CounterRecord:
        if segment_value is None:
            return await self._fetch(config.key, None, config.pattern, config.initial_value, batch)

        # The unsegmented counter always exists once a key has been used.
        await self._fetch(config.key, None, config.pattern, config.initial_value, batch)
        pattern = override.pattern if override is not None else config.pattern
        return await self._fetch(config.key, segment_value, pattern, config.initial_value, batch)

    async def _fetch(
        self,
        key: str,
        segment: str | None,
        pattern: str,
        initial_value: int,
        batch: Batch | None,
    ) -> CounterRecord:
        if batch is not None:
            pinned = batch.get(key, segment)
            if pinned is not None:
                return pinned

        record = await self._store.get_or_create(key, segment, pattern, initial_value)
        if batch is not None:
            # A concurrent caller in the same batch may have pinned it first.
            return batch.add(record)
        return record
