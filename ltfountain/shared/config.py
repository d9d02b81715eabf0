"""
Codec configuration with the reference defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .errors import InvalidArgument

DEFAULT_K = 1000
DEFAULT_BLOCK_SIZE = 32
DEFAULT_C = 0.12
DEFAULT_DELTA = 0.01
DEFAULT_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class CodecConfig:
    """
    Parameters shared by the encoder, decoder and pipeline.

    Parameters
    ----------
    k:
        Number of source blocks the message is split into.
    block_size:
        Size in bytes of each source block and of every symbol payload.
    c:
        Robust soliton tuning constant.
    delta:
        Admissible decoding failure probability, in ``[0, 1]``.
    timeout:
        Seconds a blocked put/take may wait before raising ``PipelineStall``.
        ``None`` waits forever.
    poll_interval:
        Slice, in seconds, at which blocked waits re-check completion and
        cancellation.
    """

    k: int = DEFAULT_K
    block_size: int = DEFAULT_BLOCK_SIZE
    c: float = DEFAULT_C
    delta: float = DEFAULT_DELTA
    timeout: Optional[float] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.k <= 0:
            raise InvalidArgument(f"k must be positive, got {self.k}")
        if self.block_size <= 0:
            raise InvalidArgument(
                f"block_size must be positive, got {self.block_size}"
            )
        if not self.c > 0:
            raise InvalidArgument(f"c must be positive, got {self.c}")
        if not 0.0 <= self.delta <= 1.0:
            raise InvalidArgument(f"delta must lie in [0, 1], got {self.delta}")
        if self.timeout is not None and self.timeout <= 0:
            raise InvalidArgument(f"timeout must be positive, got {self.timeout}")
        if self.poll_interval <= 0:
            raise InvalidArgument(
                f"poll_interval must be positive, got {self.poll_interval}"
            )

    @property
    def message_size(self) -> int:
        """Number of bytes a padded message occupies."""
        return self.k * self.block_size

    def replace(self, **changes) -> "CodecConfig":
        """Return a validated copy with ``changes`` applied."""
        return replace(self, **changes)


__all__ = [
    "CodecConfig",
    "DEFAULT_K",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_C",
    "DEFAULT_DELTA",
    "DEFAULT_POLL_INTERVAL",
]
