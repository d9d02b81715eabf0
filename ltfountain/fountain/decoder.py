"""
Peeling (belief-propagation) decoder for LT fountain symbols.
"""

from __future__ import annotations

import heapq
import logging
from time import perf_counter
from typing import Dict, Iterable, List, Optional, Set

import numpy as np

from ..shared.errors import DecodeFailure, InvalidArgument
from ..shared.metrics import FountainMetrics
from ..shared.utils import merge_blocks
from .pipeline import Pipeline
from .symbol import Symbol

logger = logging.getLogger(__name__)


def peel(
    symbols: Iterable[Symbol], k: int, block_size: int, *, strict: bool = True
) -> np.ndarray:
    """
    Recover the ``(k, block_size)`` source matrix from a batch of symbols.

    The batch is copied into an arena owned by this call; the caller's
    symbols are left untouched. The ripple always resolves the lowest arena
    position holding exactly one neighbor.

    With ``strict`` (the default) a ripple that runs dry before every block is
    known raises ``DecodeFailure``. ``strict=False`` returns the partially
    filled matrix with unresolved rows left zero.
    """
    arena: List[Symbol] = []
    for symbol in symbols:
        owned = symbol.copy()
        owned.cancel_duplicates()
        for index in owned.neighbors:
            if not 0 <= index < k:
                raise InvalidArgument(f"neighbor {index} outside [0, {k})")
        if owned.block_size != block_size:
            raise InvalidArgument(
                f"payload of {owned.block_size} bytes, expected {block_size}"
            )
        arena.append(owned)

    # block index -> arena positions still referencing it
    referrers: Dict[int, Set[int]] = {}
    ripple: List[int] = []
    for pos, symbol in enumerate(arena):
        for index in symbol.neighbors:
            referrers.setdefault(index, set()).add(pos)
        if symbol.residual_degree == 1:
            ripple.append(pos)
    heapq.heapify(ripple)

    blocks = np.zeros((k, block_size), dtype=np.uint8)
    resolved = [False] * k
    remaining = k

    while ripple and remaining:
        pos = heapq.heappop(ripple)
        symbol = arena[pos]
        if symbol.residual_degree != 1:
            continue
        j = symbol.neighbors[0]
        blocks[j] = symbol.payload
        resolved[j] = True
        remaining -= 1

        for other in referrers.pop(j, ()):
            peer = arena[other]
            peer.fold(j, blocks[j])
            if peer.residual_degree == 1:
                heapq.heappush(ripple, other)

    if remaining:
        unresolved = [j for j in range(k) if not resolved[j]]
        logger.warning(
            "ripple exhausted with %d of %d blocks unresolved", remaining, k
        )
        if strict:
            raise DecodeFailure(unresolved, k - remaining, len(arena))
    return blocks


class PeelingDecoder:
    """Drain a batch of symbols from a pipeline and peel it back into bytes."""

    def __init__(
        self,
        k: int,
        block_size: int,
        *,
        pipeline: Optional[Pipeline] = None,
        quota: Optional[int] = None,
        metrics: Optional[FountainMetrics] = None,
    ):
        """
        Parameters
        ----------
        k:
            Number of source blocks expected from the encoder.
        block_size:
            Size in bytes for each source block.
        pipeline:
            Channel to drain symbols from; only needed by :meth:`decode`.
        quota:
            How many symbols to drain before decoding. Defaults to the
            pipeline capacity.
        metrics:
            Optional FountainMetrics collector for instrumentation.
        """
        if k <= 0 or block_size <= 0:
            raise InvalidArgument(
                f"k and block_size must be positive, got k={k} block_size={block_size}"
            )
        if quota is not None and quota <= 0:
            raise InvalidArgument(f"quota must be positive, got {quota}")
        self.k = k
        self.block_size = block_size
        self.pipeline = pipeline
        if quota is None and pipeline is not None:
            quota = pipeline.capacity
        self.quota = quota
        self.metrics = metrics

    @classmethod
    def for_encoder(cls, encoder, metrics: Optional[FountainMetrics] = None):
        """Build the decoder that pairs with ``encoder`` over its pipeline."""
        return cls(
            encoder.k,
            encoder.block_size,
            pipeline=encoder.pipeline,
            quota=encoder.blocks_needed(),
            metrics=metrics if metrics is not None else encoder.metrics,
        )

    def decode(self) -> bytes:
        """
        Drain ``quota`` symbols, tell the producer to stop, and decode them.

        Blocks until the quota is met.
        """
        if self.pipeline is None:
            raise InvalidArgument("decode() needs a pipeline; use decode_symbols()")
        batch = self.pipeline.drain(self.quota)
        self.pipeline.signal_done()
        return self.decode_symbols(batch)

    def decode_symbols(self, symbols: Iterable[Symbol], *, strict: bool = True) -> bytes:
        """Decode an explicit batch of symbols into the padded message."""
        batch = list(symbols)
        logger.debug("peeling %d symbols over k=%d", len(batch), self.k)
        start = perf_counter()
        try:
            blocks = peel(batch, self.k, self.block_size, strict=strict)
        except DecodeFailure as exc:
            # Each resolved block consumed exactly one ripple symbol.
            if self.metrics:
                duration = perf_counter() - start
                self.metrics.record_decode(
                    duration, False, exc.resolved, len(batch), exc.resolved
                )
            raise
        if self.metrics:
            duration = perf_counter() - start
            self.metrics.record_decode(duration, True, self.k, len(batch))
        logger.info("decoded %d blocks from %d symbols", self.k, len(batch))
        return merge_blocks(blocks)


__all__ = ["PeelingDecoder", "peel"]
