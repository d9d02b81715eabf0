"""
Run an encoder and a decoder as two concurrent participants over one pipeline.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import List, Optional

from ..shared.config import CodecConfig
from ..shared.errors import PipelineClosed
from ..shared.metrics import FountainMetrics
from .decoder import PeelingDecoder
from .encoder import LTEncoder
from .symbol import Symbol

logger = logging.getLogger(__name__)


class FountainSession:
    """
    One encode/decode exchange.

    The encoder runs on a worker thread and streams symbols until the decoder,
    running in the calling thread, has drained its quota.
    """

    def __init__(
        self,
        config: Optional[CodecConfig] = None,
        *,
        metrics: Optional[FountainMetrics] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or CodecConfig()
        self.metrics = metrics
        self.encoder = LTEncoder(
            self.config.k,
            self.config.block_size,
            config=self.config,
            metrics=metrics,
            rng=rng,
        )
        self.decoder = PeelingDecoder.for_encoder(self.encoder)
        self.emitted: List[Symbol] = []
        self._producer_error: Optional[BaseException] = None

    def _produce(self, message: bytes) -> None:
        try:
            self.emitted = self.encoder.encode(message)
        except PipelineClosed:
            logger.debug("producer released by cancelled pipeline")
        except Exception as exc:
            self._producer_error = exc
            self.encoder.pipeline.cancel()

    def transfer(self, message: bytes) -> bytes:
        """Encode ``message`` and return the decoded, padded buffer."""
        # Validate up front so a bad message fails here, not on the worker.
        self.encoder.load(message)

        producer = threading.Thread(
            target=self._produce, args=(message,), name="lt-encoder", daemon=True
        )
        producer.start()
        try:
            result = self.decoder.decode()
        except BaseException:
            self.encoder.pipeline.cancel()
            raise
        finally:
            producer.join()
            if self._producer_error is not None:
                raise self._producer_error
        return result


__all__ = ["FountainSession"]
