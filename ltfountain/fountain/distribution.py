"""
Robust soliton degree distribution for LT fountain codes.
"""

from __future__ import annotations

import logging
import math
import random
from typing import List

from ..shared.config import DEFAULT_C, DEFAULT_DELTA
from ..shared.errors import DomainError, InvalidArgument

logger = logging.getLogger(__name__)

_FLOOR_EPSILON = 1e-9


class RobustSoliton:
    """
    Robust soliton distribution over degrees ``1..k``, ready for sampling.

    The normalisation constant ``beta`` is fixed at construction; sampling and
    the redundancy estimate both depend on it.
    """

    def __init__(self, k: int, c: float = DEFAULT_C, delta: float = DEFAULT_DELTA):
        """
        Parameters
        ----------
        k:
            Number of source blocks.
        c:
            Positive tuning constant scaling the ``tau`` spike.
        delta:
            Admissible failure probability, in ``[0, 1]``.
        """
        if not (isinstance(k, int) and k > 0):
            raise InvalidArgument(f"k must be a positive integer, got {k!r}")
        if not c > 0:
            raise InvalidArgument(f"c must be positive, got {c!r}")
        if not 0.0 <= delta <= 1.0:
            raise InvalidArgument(f"delta must lie in [0, 1], got {delta!r}")

        self.k = k
        self.c = c
        self.delta = delta

        # delta == 0 pushes R to infinity, which leaves tau identically zero.
        self.R = c * math.log(k / delta) * math.sqrt(k) if delta > 0 else math.inf
        if self.R == math.inf:
            self.spike = 0
        elif self.R > 0:
            # Half-up rounding, not Python's banker's rounding.
            self.spike = int(math.floor(k / self.R + 0.5))
        else:
            self.spike = k + 1

        self.beta = math.fsum(self.rho(i) + self.tau(i) for i in range(1, k + 1))
        self._cdf = self._build_cdf()

        logger.debug(
            "robust soliton k=%d c=%g delta=%g R=%g spike=%d beta=%.6f needed=%d",
            k,
            c,
            delta,
            self.R,
            self.spike,
            self.beta,
            self.blocks_needed(),
        )

    def _check(self, i: int) -> None:
        if i < 1 or i > self.k:
            raise DomainError(f"degree {i} outside [1, {self.k}]")

    def rho(self, i: int) -> float:
        """Ideal soliton mass at ``i``."""
        self._check(i)
        if i == 1:
            return 1.0 / self.k
        return 1.0 / (i * (i - 1.0))

    def tau(self, i: int) -> float:
        """Robust correction added to the ideal soliton at ``i``."""
        self._check(i)
        if self.R == 0 or i > self.spike:
            return 0.0
        if i < self.spike:
            return self.R / (i * self.k)
        return self.R * math.log(self.R / self.delta) / self.k

    def mu(self, i: int) -> float:
        """Normalised robust soliton mass at ``i``."""
        return (self.rho(i) + self.tau(i)) / self.beta

    def _build_cdf(self) -> List[float]:
        """Pre-compute the cumulative distribution over ``1..k``."""
        cumulative = []
        running = 0.0
        for i in range(1, self.k + 1):
            running += self.mu(i)
            cumulative.append(running)
        return cumulative

    def sample(self, seed: int) -> int:
        """Draw a degree; the result is a pure function of ``seed``."""
        r = random.Random(seed).random()
        for degree, cutoff in enumerate(self._cdf, start=1):
            if cutoff >= r:
                return degree
        # Floating-point shortfall in the running sum.
        return self.k

    def blocks_needed(self) -> int:
        """
        Number of encoded symbols a receiver needs to finish decoding with
        probability at least ``1 - delta``.
        """
        # beta carries float rounding; an exact k * 1.0 must not floor to k - 1.
        return int(math.floor(self.k * self.beta + _FLOOR_EPSILON))

    def __repr__(self) -> str:
        return f"RobustSoliton(k={self.k}, c={self.c}, delta={self.delta})"


__all__ = ["RobustSoliton"]
