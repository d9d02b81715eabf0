"""
Bounded single-producer/single-consumer channel between encoder and decoder.

The pipeline carries two signals besides the symbols themselves: a completion
flag, written once by the consumer when it has its batch, and a cancellation
flag that wakes either side out of a blocked wait. Without a timeout a
consumer whose quota exceeds what the producer will ever supply blocks
forever; configure ``timeout`` to turn that into ``PipelineStall``.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import List, Optional

from ..shared.config import DEFAULT_POLL_INTERVAL
from ..shared.errors import InvalidArgument, PipelineClosed, PipelineStall
from .symbol import Symbol

logger = logging.getLogger(__name__)


class Pipeline:
    """FIFO of symbols with a shared completion token."""

    def __init__(
        self,
        capacity: int,
        *,
        timeout: Optional[float] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        if capacity <= 0:
            raise InvalidArgument(f"capacity must be positive, got {capacity}")
        if timeout is not None and timeout <= 0:
            raise InvalidArgument(f"timeout must be positive, got {timeout}")
        if poll_interval <= 0:
            raise InvalidArgument(
                f"poll_interval must be positive, got {poll_interval}"
            )
        self.capacity = capacity
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._queue: "queue.Queue[Symbol]" = queue.Queue(maxsize=capacity)
        self._done = threading.Event()
        self._cancelled = threading.Event()

    @property
    def done(self) -> bool:
        """True once the consumer has drained its batch."""
        return self._done.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def signal_done(self) -> None:
        self._done.set()

    def cancel(self) -> None:
        """Wake any blocked participant with ``PipelineClosed``."""
        self._cancelled.set()

    def qsize(self) -> int:
        return self._queue.qsize()

    def _deadline(self) -> Optional[float]:
        if self.timeout is None:
            return None
        return time.monotonic() + self.timeout

    def _wait_slice(self, deadline: Optional[float], role: str) -> float:
        if self._cancelled.is_set():
            logger.warning("pipeline cancelled while %s was waiting", role)
            raise PipelineClosed(f"pipeline cancelled while {role} was waiting")
        if deadline is None:
            return self.poll_interval
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning("%s stalled for %.3fs on the pipeline", role, self.timeout)
            raise PipelineStall(f"{role} waited more than {self.timeout}s")
        return min(self.poll_interval, remaining)

    def put(self, symbol: Symbol) -> bool:
        """
        Push ``symbol``, blocking while the channel is full.

        Returns False without delivering the symbol if the consumer signals
        completion while the producer is blocked.
        """
        deadline = self._deadline()
        while True:
            # Completion wins over cancellation: the consumer has its batch.
            if self._done.is_set():
                try:
                    self._queue.put_nowait(symbol)
                    return True
                except queue.Full:
                    return False
            wait = self._wait_slice(deadline, "producer")
            try:
                self._queue.put(symbol, timeout=wait)
                return True
            except queue.Full:
                continue

    def take(self) -> Symbol:
        """Pop the oldest symbol, blocking until one is available."""
        deadline = self._deadline()
        while True:
            wait = self._wait_slice(deadline, "consumer")
            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                continue

    def drain(self, count: int) -> List[Symbol]:
        """Take exactly ``count`` symbols, in arrival order."""
        return [self.take() for _ in range(count)]


__all__ = ["Pipeline"]
