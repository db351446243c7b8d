#!/usr/bin/env python3
"""Throughput micro-benchmarks for hashing and pair generation."""
from __future__ import annotations

import argparse
import random
import time
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from siphashcoll.core import siphash24
from siphashcoll.generators import ByteGenerator, PhraseGenerator
from siphashcoll.harness import check_pair
from siphashcoll.numba_siphash import pack_messages, siphash24_batch
from siphashcoll.siphash import HARNESS_KEY


def bench_python_hash(count: int, length: int, seed: int) -> None:
    rng = random.Random(seed)
    msgs = [rng.randbytes(length) for _ in range(count)]
    k0, k1 = HARNESS_KEY
    start = time.time()
    for m in msgs:
        siphash24(k0, k1, m)
    elapsed = time.time() - start
    rate = count / elapsed if elapsed else 0.0
    print(f"python_hash: count={count} length={length} time={elapsed:.3f}s rate={rate:.0f}/s")


def bench_numba_hash(count: int, length: int, seed: int) -> None:
    rng = random.Random(seed)
    msgs = [rng.randbytes(length) for _ in range(count)]
    k0, k1 = HARNESS_KEY
    buf, offsets = pack_messages(msgs)
    siphash24_batch(k0, k1, buf, offsets)  # compile
    start = time.time()
    siphash24_batch(k0, k1, buf, offsets)
    elapsed = time.time() - start
    rate = count / elapsed if elapsed else 0.0
    print(f"numba_hash: count={count} length={length} time={elapsed:.3f}s rate={rate:.0f}/s")


def bench_pairs(count: int, seed: int) -> None:
    gens = {
        "bytes": ByteGenerator(random.Random(seed)),
        "phrase": PhraseGenerator(["alpha", "beta", "gamma", "delta"], max_words=3, rng=random.Random(seed)),
    }
    for name, gen in gens.items():
        start = time.time()
        hits = 0
        for _ in range(count):
            if check_pair(gen()):
                hits += 1
        elapsed = time.time() - start
        rate = count / elapsed if elapsed else 0.0
        print(f"pairs_{name}: count={count} collisions={hits} time={elapsed:.3f}s rate={rate:.0f} pairs/s")


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--count", type=int, default=50_000)
    ap.add_argument("--length", type=int, default=32)
    ap.add_argument("--seed", type=int, default=2024)
    args = ap.parse_args()

    bench_python_hash(args.count, args.length, args.seed)
    bench_numba_hash(args.count, args.length, args.seed)
    bench_pairs(args.count // 5, args.seed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
