"""
Exception hierarchy shared by the fountain encoder, decoder and pipeline.
"""

from __future__ import annotations

from typing import Sequence


class FountainError(Exception):
    """Base class for every error raised by ltfountain."""


class InvalidArgument(FountainError, ValueError):
    """A parameter was outside its valid domain at an API boundary."""


class DomainError(FountainError, ValueError):
    """The degree distribution was queried outside ``[1, k]``.

    Bounded loops never do this, so seeing one means an internal bug.
    """


class SymbolFormatError(FountainError, ValueError):
    """A packed symbol frame could not be parsed."""


class DecodeFailure(FountainError):
    """The ripple ran dry while source blocks were still unresolved."""

    def __init__(self, unresolved: Sequence[int], resolved: int, symbols: int):
        self.unresolved = list(unresolved)
        self.resolved = resolved
        self.symbols = symbols
        super().__init__(
            f"decode stalled with {len(self.unresolved)} unresolved block(s) "
            f"after resolving {resolved} from {symbols} symbol(s)"
        )


class PipelineError(FountainError):
    """Base class for failures of a blocked pipeline participant."""


class PipelineStall(PipelineError, TimeoutError):
    """A blocking put/take outlived the configured timeout."""


class PipelineClosed(PipelineError):
    """The pipeline was cancelled while a participant was waiting on it."""


__all__ = [
    "FountainError",
    "InvalidArgument",
    "DomainError",
    "SymbolFormatError",
    "DecodeFailure",
    "PipelineError",
    "PipelineStall",
    "PipelineClosed",
]
