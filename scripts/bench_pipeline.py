#!/usr/bin/env python3
"""
Pipeline benchmark for the LT fountain encoder/decoder.

Runs Monte Carlo sessions across a grid of block counts and prints success
rate, symbols drained, symbols emitted and decode latency.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

# Ensure project root import
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from ltfountain.fountain.session import FountainSession
from ltfountain.shared.config import DEFAULT_BLOCK_SIZE, DEFAULT_C, DEFAULT_DELTA, CodecConfig
from ltfountain.shared.errors import DecodeFailure
from ltfountain.shared.metrics import FountainMetrics


def make_payload(nbytes: int, seed: int | None = None) -> bytes:
    rnd = random.Random(seed)
    return bytes(rnd.getrandbits(8) for _ in range(nbytes))


def run_trial(config: CodecConfig, seed: int) -> tuple[bool, FountainMetrics]:
    payload = make_payload(config.message_size, seed=seed)
    metrics = FountainMetrics()
    session = FountainSession(config, metrics=metrics, rng=random.Random(seed))
    try:
        recovered = session.transfer(payload)
    except DecodeFailure:
        return False, metrics
    return recovered == payload, metrics


def main() -> int:
    ap = argparse.ArgumentParser(description="Fountain pipeline benchmark")
    ap.add_argument("--ks", type=str, default="16,64,256", help="comma list of k")
    ap.add_argument("--block", type=int, default=DEFAULT_BLOCK_SIZE, help="block size bytes")
    ap.add_argument("--c", type=float, default=DEFAULT_C, help="robust soliton c")
    ap.add_argument("--delta", type=float, default=DEFAULT_DELTA, help="failure bound")
    ap.add_argument("--trials", type=int, default=20, help="trials per config")
    ap.add_argument("--seed", type=int, default=1337, help="base seed")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ks = [int(x) for x in args.ks.split(",")]
    print(
        f"block={args.block} c={args.c} delta={args.delta} trials={args.trials}"
    )
    for k in ks:
        config = CodecConfig(k=k, block_size=args.block, c=args.c, delta=args.delta)
        successes = 0
        merged = FountainMetrics()
        for trial in range(args.trials):
            ok, m = run_trial(config, args.seed + trial)
            successes += 1 if ok else 0
            merged.merge(m)

        summary = merged.summary()
        rate = successes / args.trials
        avg_latency_ms = summary["average_decode_duration"] * 1000.0
        print(
            f"k={k:<5d} -> success={rate * 100:5.1f}% "
            f"drained={summary['average_symbols_drained']:.0f} "
            f"used={summary['average_symbols_used']:.0f} "
            f"emitted≈{summary['average_symbols_emitted']:.1f} "
            f"lat≈{avg_latency_ms:.2f}ms avg_degree={summary['average_degree']:.2f}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
