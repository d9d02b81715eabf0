"""
LT fountain encoder driven by the robust soliton distribution.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Union

import numpy as np

from ..shared.config import CodecConfig
from ..shared.errors import InvalidArgument
from ..shared.metrics import FountainMetrics
from ..shared.utils import as_block_matrix, pad_message, split_blocks
from .distribution import RobustSoliton
from .pipeline import Pipeline
from .symbol import Symbol

logger = logging.getLogger(__name__)

_SEED_BITS = 63
_SEED_MASK = (1 << 64) - 1


class LTEncoder:
    """
    Turn a message into an open-ended stream of XOR-combined symbols.

    The encoder owns the source block matrix and the pipeline the decoder
    drains. Both the degree and the neighbor indices of a symbol are pure
    functions of its seed, so a receiver holding the same parameters can
    regenerate them.
    """

    def __init__(
        self,
        k: int,
        block_size: int,
        *,
        config: Optional[CodecConfig] = None,
        pipeline: Optional[Pipeline] = None,
        metrics: Optional[FountainMetrics] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Parameters
        ----------
        k:
            Number of source blocks.
        block_size:
            Size in bytes of every source block and symbol payload.
        config:
            Remaining codec settings (``c``, ``delta``, timeouts). Its ``k``
            and ``block_size`` are overridden by the explicit arguments.
        pipeline:
            Channel to push symbols into. Defaults to one sized to
            ``blocks_needed()``.
        metrics:
            Optional FountainMetrics collector for instrumentation.
        rng:
            Source of fresh symbol seeds. Defaults to an OS-seeded generator.
        """
        if not isinstance(k, int) or not isinstance(block_size, int):
            raise InvalidArgument("k and block_size must be integers")
        if k <= 0 or block_size <= 0:
            raise InvalidArgument(
                f"k and block_size must be positive, got k={k} block_size={block_size}"
            )
        config = (config or CodecConfig()).replace(k=k, block_size=block_size)
        distribution = RobustSoliton(k, config.c, config.delta)

        self.config = config
        self.k = k
        self.block_size = block_size
        self.distribution = distribution
        self.pipeline = pipeline or Pipeline(
            distribution.blocks_needed(),
            timeout=config.timeout,
            poll_interval=config.poll_interval,
        )
        self.metrics = metrics
        self.blocks: Optional[np.ndarray] = None
        self._rng = rng or random.Random()

    def blocks_needed(self) -> int:
        return self.distribution.blocks_needed()

    def pad(self, message: bytes) -> bytes:
        """Zero-pad or truncate ``message`` to exactly ``k * block_size`` bytes."""
        return pad_message(message, self.k * self.block_size)

    def split(self, padded: bytes) -> np.ndarray:
        """Partition a padded buffer into ``k`` contiguous blocks."""
        return split_blocks(padded, self.k, self.block_size)

    def load(self, message: Union[bytes, bytearray, memoryview]) -> np.ndarray:
        """Pad, split and keep ``message`` as the source block matrix."""
        if message is None:
            raise InvalidArgument("message is required")
        if isinstance(message, str):
            message = message.encode("utf-8")
        if len(message) == 0:
            raise InvalidArgument("message must not be empty")
        self.blocks = self.split(self.pad(message))
        return self.blocks

    def load_blocks(self, blocks: Union[np.ndarray, Sequence[bytes]]) -> np.ndarray:
        """Use an already split ``k x block_size`` matrix as the source."""
        if blocks is None:
            raise InvalidArgument("blocks are required")
        self.blocks = as_block_matrix(blocks, self.k, self.block_size)
        return self.blocks

    def symbol_for_seed(self, seed: int) -> Symbol:
        """Build the symbol a given seed produces over the loaded blocks."""
        if self.blocks is None:
            raise InvalidArgument("no source blocks loaded")

        degree = self.distribution.sample(seed)
        # Same seed, different generator family: the index draws depend only on
        # the seed, but not on the uniform draw that picked the degree.
        picker = np.random.default_rng(seed & _SEED_MASK)
        draws = picker.integers(0, self.k, size=degree)
        symbol = Symbol.empty(seed, degree, self.block_size)
        for x, j in enumerate(draws.tolist()):
            symbol.add_neighbor(j)
            if x == 0:
                symbol.set_payload(self.blocks[j])
            else:
                symbol.xor(self.blocks[j])
        return symbol

    def encode_one(self) -> Symbol:
        """Generate one symbol from a fresh seed."""
        symbol = self.symbol_for_seed(self._rng.getrandbits(_SEED_BITS))
        if self.metrics:
            self.metrics.record_degree(symbol.degree)
        return symbol

    def generate(self, n: int) -> List[Symbol]:
        """Generate ``n`` symbols without touching the pipeline."""
        return [self.encode_one() for _ in range(n)]

    def encode(self, message: Union[bytes, bytearray, memoryview]) -> List[Symbol]:
        """
        Load ``message`` and stream symbols into the pipeline until the
        consumer signals completion.

        Returns the producer's own copies of every symbol it delivered.
        """
        self.load(message)
        return self._run()

    def encode_blocks(self, blocks: Union[np.ndarray, Sequence[bytes]]) -> List[Symbol]:
        """Like :meth:`encode`, for a pre-split block matrix."""
        self.load_blocks(blocks)
        return self._run()

    def _run(self) -> List[Symbol]:
        emitted: List[Symbol] = []
        logger.debug(
            "encoding k=%d block_size=%d capacity=%d",
            self.k,
            self.block_size,
            self.pipeline.capacity,
        )
        while True:
            symbol = self.encode_one()
            if not self.pipeline.put(symbol.copy()):
                break
            emitted.append(symbol)
            if self.pipeline.done:
                break

        logger.info("encoder stopped after emitting %d symbols", len(emitted))
        if self.metrics:
            self.metrics.record_encode(len(emitted))
        return emitted


__all__ = ["LTEncoder"]
