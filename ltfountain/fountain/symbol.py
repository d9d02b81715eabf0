"""
Encoded LT symbol: generating seed, degree, neighbor list and XOR payload.
"""

from __future__ import annotations

import struct
import zlib
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..shared.errors import SymbolFormatError
from ..shared.metrics import FountainMetrics
from ..shared.utils import xor_into

# seed (i64), degree (u32), neighbor count (u32)
_HEADER = struct.Struct(">qII")
_TAG_BYTES = 4


@dataclass
class Symbol:
    """
    One encoded unit of the fountain stream.

    ``neighbors`` holds the source block indices the payload still depends on,
    in draw order and with repeats kept. It starts with ``degree`` entries and
    only shrinks while a decoder owns the symbol.
    """

    seed: int
    degree: int
    neighbors: List[int] = field(default_factory=list)
    payload: np.ndarray = field(default=None, repr=False)

    @classmethod
    def empty(cls, seed: int, degree: int, block_size: int) -> "Symbol":
        return cls(seed, degree, [], np.zeros(block_size, dtype=np.uint8))

    @property
    def block_size(self) -> int:
        return len(self.payload)

    @property
    def residual_degree(self) -> int:
        return len(self.neighbors)

    def add_neighbor(self, index: int) -> None:
        self.neighbors.append(index)

    def remove_neighbor(self, index: int) -> None:
        """Drop one occurrence of ``index`` from the neighbor list."""
        self.neighbors.remove(index)

    def set_payload(self, block: np.ndarray) -> None:
        self.payload = np.array(block, dtype=np.uint8, copy=True)

    def xor(self, block: np.ndarray) -> None:
        """XOR a source block into the payload in place."""
        xor_into(self.payload, block)

    def fold(self, index: int, block: np.ndarray) -> None:
        """Peel a resolved source block off this symbol."""
        self.xor(block)
        self.remove_neighbor(index)

    def cancel_duplicates(self) -> None:
        """
        Drop neighbor indices that occur an even number of times.

        Folding the same block twice cancels under XOR, so the payload already
        matches the reduced list; indices seen an odd number of times are kept
        once, in first-seen order.
        """
        counts = Counter(self.neighbors)
        kept = []
        for index in self.neighbors:
            if counts[index] % 2 and index not in kept:
                kept.append(index)
        self.neighbors = kept

    def copy(self) -> "Symbol":
        """Return a deep copy that shares no state with this symbol."""
        return Symbol(self.seed, self.degree, list(self.neighbors), self.payload.copy())

    def pack(self, integrity_check: bool = False) -> bytes:
        """
        Serialise to ``seed:i64 degree:u32 count:u32 neighbors:u32* payload``,
        big-endian, optionally followed by a CRC32 tag.
        """
        frame = _HEADER.pack(self.seed, self.degree, len(self.neighbors))
        frame += struct.pack(f">{len(self.neighbors)}I", *self.neighbors)
        frame += self.payload.tobytes()
        if integrity_check:
            checksum = zlib.crc32(frame) & 0xFFFFFFFF
            frame += checksum.to_bytes(_TAG_BYTES, byteorder="big")
        return frame

    @classmethod
    def unpack(
        cls,
        data: bytes,
        block_size: int,
        integrity_check: bool = False,
        metrics: Optional[FountainMetrics] = None,
    ) -> "Symbol":
        """
        Parse a frame produced by :meth:`pack`.

        A rejected frame raises ``SymbolFormatError`` whose message is the
        reason, which is also recorded on ``metrics`` when given.
        """
        try:
            return cls._parse(data, block_size, integrity_check)
        except SymbolFormatError as exc:
            if metrics:
                metrics.record_symbol_rejected(str(exc))
            raise

    @classmethod
    def _parse(cls, data: bytes, block_size: int, integrity_check: bool) -> "Symbol":
        if integrity_check:
            if len(data) < _TAG_BYTES:
                raise SymbolFormatError("too_short")
            provided = data[-_TAG_BYTES:]
            data = data[:-_TAG_BYTES]
            expected = zlib.crc32(data) & 0xFFFFFFFF
            if provided != expected.to_bytes(_TAG_BYTES, byteorder="big"):
                raise SymbolFormatError("crc_mismatch")

        if len(data) < _HEADER.size:
            raise SymbolFormatError("too_short")
        seed, degree, count = _HEADER.unpack_from(data)
        expected_len = _HEADER.size + 4 * count + block_size
        if len(data) != expected_len:
            raise SymbolFormatError("bad_length")

        neighbors = list(struct.unpack_from(f">{count}I", data, _HEADER.size))
        payload = np.frombuffer(
            data, dtype=np.uint8, count=block_size, offset=_HEADER.size + 4 * count
        ).copy()
        return cls(seed, degree, neighbors, payload)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Symbol):
            return NotImplemented
        return (
            self.seed == other.seed
            and self.degree == other.degree
            and self.neighbors == other.neighbors
            and np.array_equal(self.payload, other.payload)
        )


__all__ = ["Symbol"]
