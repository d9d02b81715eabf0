"""
Fountain Code Module
Exports RobustSoliton, Symbol, Pipeline, LTEncoder, PeelingDecoder and FountainSession
"""

from .distribution import RobustSoliton
from .symbol import Symbol
from .pipeline import Pipeline
from .encoder import LTEncoder
from .decoder import PeelingDecoder, peel
from .session import FountainSession

__all__ = [
    "RobustSoliton",
    "Symbol",
    "Pipeline",
    "LTEncoder",
    "PeelingDecoder",
    "peel",
    "FountainSession",
]
