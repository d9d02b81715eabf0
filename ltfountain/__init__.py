"""
ltfountain - Luby Transform fountain codes with a robust soliton distribution
and a peeling decoder.
"""

__version__ = "0.1.0"

from .shared.config import CodecConfig
from .shared.errors import (
    DecodeFailure,
    DomainError,
    FountainError,
    InvalidArgument,
    PipelineClosed,
    PipelineError,
    PipelineStall,
    SymbolFormatError,
)
from .shared.metrics import FountainMetrics
from .fountain import (
    FountainSession,
    LTEncoder,
    PeelingDecoder,
    Pipeline,
    RobustSoliton,
    Symbol,
    peel,
)

__all__ = [
    "CodecConfig",
    "FountainMetrics",
    "FountainSession",
    "LTEncoder",
    "PeelingDecoder",
    "Pipeline",
    "RobustSoliton",
    "Symbol",
    "peel",
    "FountainError",
    "InvalidArgument",
    "DomainError",
    "SymbolFormatError",
    "DecodeFailure",
    "PipelineError",
    "PipelineStall",
    "PipelineClosed",
]
