"""
Tests for the Symbol data type and its wire frames.
"""
import numpy as np
import pytest

from ltfountain.fountain.symbol import Symbol
from ltfountain.shared.errors import SymbolFormatError


def _block(*values):
    return np.array(values, dtype=np.uint8)


def test_xor_and_fold():
    """Folding a resolved block XORs it out and drops the neighbor."""
    symbol = Symbol(1, 2, [0, 1], _block(0x0F, 0xF0))
    symbol.fold(0, _block(0x01, 0x10))
    assert symbol.neighbors == [1]
    assert symbol.payload.tolist() == [0x0E, 0xE0]


def test_remove_neighbor_drops_one_occurrence():
    symbol = Symbol(1, 3, [2, 5, 2], _block(0))
    symbol.remove_neighbor(2)
    assert symbol.neighbors == [5, 2]


@pytest.mark.parametrize("neighbors, expected", [
    ([3, 3], []),
    ([3, 3, 5], [5]),
    ([1, 0, 1], [0]),
    ([2, 2, 2], [2]),
    ([4, 1, 4, 1, 7], [7]),
    ([0, 1, 2], [0, 1, 2]),
])
def test_cancel_duplicates(neighbors, expected):
    """Pairs of repeated indices cancel; odd counts keep one occurrence."""
    symbol = Symbol(0, len(neighbors), list(neighbors), _block(0))
    symbol.cancel_duplicates()
    assert symbol.neighbors == expected
    assert symbol.degree == len(neighbors)


def test_copy_is_independent():
    original = Symbol(9, 2, [0, 1], _block(1, 2, 3))
    clone = original.copy()
    clone.fold(0, _block(1, 1, 1))
    assert original.neighbors == [0, 1]
    assert original.payload.tolist() == [1, 2, 3]
    assert clone != original


@pytest.mark.parametrize("integrity_check", [False, True])
def test_pack_unpack(integrity_check):
    symbol = Symbol(-42, 3, [7, 0, 7], _block(*range(8)))
    frame = symbol.pack(integrity_check=integrity_check)
    assert len(frame) == 16 + 4 * 3 + 8 + (4 if integrity_check else 0)
    assert Symbol.unpack(frame, 8, integrity_check=integrity_check) == symbol


def test_unpack_rejects_corrupted_frame():
    frame = bytearray(Symbol(5, 1, [2], _block(9, 9, 9, 9)).pack(integrity_check=True))
    frame[-5] ^= 0xFF
    with pytest.raises(SymbolFormatError, match="crc_mismatch"):
        Symbol.unpack(bytes(frame), 4, integrity_check=True)


@pytest.mark.parametrize("frame", [b"", b"\x00" * 10])
def test_unpack_rejects_short_frames(frame):
    with pytest.raises(SymbolFormatError):
        Symbol.unpack(frame, 4)


def test_unpack_rejects_wrong_block_size():
    frame = Symbol(5, 1, [2], _block(1, 2, 3, 4)).pack()
    with pytest.raises(SymbolFormatError, match="bad_length"):
        Symbol.unpack(frame, 8)
