"""
End-to-end tests running encoder and decoder as concurrent participants.
"""
import random

import pytest

from ltfountain.fountain.session import FountainSession
from ltfountain.shared.config import CodecConfig
from ltfountain.shared.errors import DecodeFailure, InvalidArgument
from ltfountain.shared.metrics import FountainMetrics


def test_round_trip_through_pipeline():
    """A 16-byte message over k=4, block_size=4 comes back padded and intact."""
    message = b"fountain codes!!"
    config = CodecConfig(k=4, block_size=4, poll_interval=0.01)
    successes = 0
    for seed in range(30):
        session = FountainSession(config, rng=random.Random(seed))
        try:
            result = session.transfer(message)
        except DecodeFailure:
            continue
        assert result == session.encoder.pad(message)
        assert len(session.emitted) >= session.encoder.blocks_needed()
        assert session.encoder.pipeline.done
        successes += 1
    assert successes > 15


def test_short_message_is_padded():
    config = CodecConfig(k=4, block_size=4, poll_interval=0.01)
    for seed in range(30):
        session = FountainSession(config, rng=random.Random(seed))
        try:
            result = session.transfer(b"hi")
        except DecodeFailure:
            continue
        assert result == b"hi" + b"\x00" * 14
        return
    pytest.fail("no successful transfer in 30 attempts")


def test_metrics_follow_the_session():
    config = CodecConfig(k=4, block_size=4, poll_interval=0.01)
    metrics = FountainMetrics()
    attempts = 10
    for seed in range(attempts):
        session = FountainSession(config, metrics=metrics, rng=random.Random(seed))
        try:
            session.transfer(b"metrics-matter!!")
        except DecodeFailure:
            pass

    summary = metrics.summary()
    assert summary["decode_attempts"] == attempts
    assert summary["encode_runs"] == attempts
    assert summary["average_symbols_used"] <= 4
    assert set(metrics.symbols_available) == {session.encoder.blocks_needed()}
    assert summary["average_symbols_emitted"] >= session.encoder.blocks_needed()


def test_decoder_failure_releases_producer(monkeypatch):
    config = CodecConfig(k=4, block_size=4, poll_interval=0.01)
    session = FountainSession(config, rng=random.Random(1))

    def stalled(symbols, strict=True):
        raise DecodeFailure([0, 1, 2, 3], 0, len(list(symbols)))

    monkeypatch.setattr(session.decoder, "decode_symbols", stalled)
    with pytest.raises(DecodeFailure):
        session.transfer(b"never decoded!!!")
    assert session.encoder.pipeline.cancelled


def test_empty_message_fails_before_threads_start():
    session = FountainSession(CodecConfig(k=4, block_size=4))
    with pytest.raises(InvalidArgument):
        session.transfer(b"")
    assert session.emitted == []
