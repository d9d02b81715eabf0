"""
Tests for the peeling decoder and its ripple algorithm.
"""
import random

import numpy as np
import pytest

from ltfountain.fountain.decoder import PeelingDecoder, peel
from ltfountain.fountain.encoder import LTEncoder
from ltfountain.fountain.symbol import Symbol
from ltfountain.shared.errors import DecodeFailure, InvalidArgument
from ltfountain.shared.metrics import FountainMetrics

SOURCE = [b"b0b0", b"B1B1", b"c2c2", b"D3D3"]


def _block(data):
    return np.frombuffer(data, dtype=np.uint8).copy()


def _symbol(neighbors, seed=0):
    payload = np.zeros(4, dtype=np.uint8)
    for j in neighbors:
        payload ^= _block(SOURCE[j])
    return Symbol(seed, len(neighbors), list(neighbors), payload)


def test_triangular_chain():
    """A clean triangular dependency chain resolves every block."""
    symbols = [
        _symbol([0]),
        _symbol([0, 1]),
        _symbol([0, 1, 2]),
        _symbol([0, 1, 2, 3]),
    ]
    decoder = PeelingDecoder(4, 4)
    assert decoder.decode_symbols(symbols) == b"".join(SOURCE)


def test_chain_in_any_order():
    symbols = [
        _symbol([3, 2, 1, 0]),
        _symbol([1, 0]),
        _symbol([2, 0, 1]),
        _symbol([0]),
    ]
    assert PeelingDecoder(4, 4).decode_symbols(symbols) == b"".join(SOURCE)


def test_decode_leaves_batch_untouched():
    symbols = [_symbol([0]), _symbol([0, 1]), _symbol([1, 2]), _symbol([2, 3])]
    before = [symbol.copy() for symbol in symbols]
    peel(symbols, 4, 4)
    assert symbols == before


def test_stall_is_a_failure():
    """No degree-1 symbol and no chain: decode fails instead of returning zeros."""
    symbols = [_symbol([0, 1]), _symbol([2, 3])]
    metrics = FountainMetrics()
    decoder = PeelingDecoder(4, 4, metrics=metrics)

    with pytest.raises(DecodeFailure) as excinfo:
        decoder.decode_symbols(symbols)

    assert excinfo.value.unresolved == [0, 1, 2, 3]
    assert excinfo.value.resolved == 0
    assert excinfo.value.symbols == 2
    assert metrics.decode_failures == 1
    assert metrics.stalled_resolved == [0]


def test_partial_stall_reports_unresolved_blocks():
    symbols = [_symbol([0]), _symbol([0, 1]), _symbol([2, 3])]
    with pytest.raises(DecodeFailure) as excinfo:
        peel(symbols, 4, 4)
    assert excinfo.value.unresolved == [2, 3]
    assert excinfo.value.resolved == 2


def test_lenient_mode_returns_zero_filled_rows():
    symbols = [_symbol([0]), _symbol([2, 3])]
    blocks = peel(symbols, 4, 4, strict=False)
    assert bytes(blocks[0]) == SOURCE[0]
    assert not blocks[1:].any()


def test_duplicate_neighbors_do_not_break_decoding():
    """Repeated indices cancel: [1, 1] is inert, [1, 0, 1] acts as [0]."""
    symbols = [
        _symbol([1, 1]),
        _symbol([1, 0, 1]),
        _symbol([0, 1]),
        _symbol([3, 2, 3, 3]),
        _symbol([2]),
    ]
    assert not symbols[0].payload.any()
    assert PeelingDecoder(4, 4).decode_symbols(symbols) == b"".join(SOURCE)


def test_ripple_picks_first_single_neighbor_symbol():
    """Conflicting degree-1 symbols: the earliest one in the batch wins."""
    bogus = Symbol(0, 1, [0], _block(b"XXXX"))
    symbols = [_symbol([1]), bogus, _symbol([0]), _symbol([2]), _symbol([3])]
    blocks = peel(symbols, 4, 4)
    assert bytes(blocks[0]) == b"XXXX"
    assert bytes(blocks[1]) == SOURCE[1]


def test_rejects_foreign_symbols():
    with pytest.raises(InvalidArgument):
        peel([_symbol([0]), Symbol(0, 1, [9], _block(b"AAAA"))], 4, 4)
    with pytest.raises(InvalidArgument):
        peel([Symbol(0, 1, [0], _block(b"AAAAAAAA"))], 4, 4)


def test_decode_requires_pipeline():
    with pytest.raises(InvalidArgument):
        PeelingDecoder(4, 4).decode()


def test_round_trip_from_generated_symbols():
    """Generated batches of blocks_needed() symbols decode to the padded input."""
    message = b"sixteen byte msg"
    successes = 0
    for seed in range(40):
        encoder = LTEncoder(4, 4, rng=random.Random(seed))
        encoder.load(message)
        symbols = encoder.generate(encoder.blocks_needed())
        try:
            result = PeelingDecoder(4, 4).decode_symbols(symbols)
        except DecodeFailure:
            continue
        assert result == encoder.pad(message)
        successes += 1
    assert successes > 20


def test_round_trip_larger_message():
    message = bytes(random.Random(0).getrandbits(8) for _ in range(700))
    successes = 0
    for seed in range(10):
        encoder = LTEncoder(50, 16, rng=random.Random(seed))
        encoder.load(message)
        symbols = encoder.generate(2 * encoder.blocks_needed())
        try:
            result = PeelingDecoder(50, 16).decode_symbols(symbols)
        except DecodeFailure:
            continue
        assert result == encoder.pad(message)
        successes += 1
    assert successes >= 5
