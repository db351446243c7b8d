#!/usr/bin/env python3
"""Accuracy checks for the SipHash-2-4 engines."""
from __future__ import annotations

import argparse
import random
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from siphashcoll.analysis import avalanche
from siphashcoll.core import siphash24
from siphashcoll.numba_siphash import siphash24_many
from siphashcoll.siphash import HARNESS_KEY
from siphashcoll.verify import check_reference_vectors


def check_vectors() -> bool:
    ok, bad = check_reference_vectors()
    for n, ours, ref in bad:
        print(f"vector mismatch: len={n} ours={ours} ref={ref}")
    print(f"reference_vectors: {'PASS' if ok else 'FAIL'}")
    return ok


def check_engines(samples: int, seed: int) -> bool:
    rng = random.Random(seed)
    msgs = [rng.randbytes(rng.randrange(0, 512)) for _ in range(samples)]
    k0, k1 = HARNESS_KEY
    ref = [siphash24(k0, k1, m) for m in msgs]
    got = siphash24_many(k0, k1, msgs)
    mismatches = sum(1 for a, b in zip(ref, got) if a != b)
    ok = mismatches == 0
    print(f"numba_vs_python: {'PASS' if ok else 'FAIL'} samples={samples} mismatches={mismatches}")
    return ok


def check_avalanche(samples: int, seed: int) -> bool:
    rep = avalanche(samples, 16, seed=seed, engine="numba")
    ok = 0.48 < rep.mean < 0.52
    print(
        f"avalanche: {'PASS' if ok else 'FAIL'} mean={rep.mean:.4f} "
        f"min_bit={rep.min_bit_prob:.4f} max_bit={rep.max_bit_prob:.4f}"
    )
    return ok


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--samples", type=int, default=2000)
    ap.add_argument("--seed", type=int, default=2024)
    args = ap.parse_args()

    ok = check_vectors()
    ok = check_engines(args.samples, args.seed) and ok
    ok = check_avalanche(max(1, args.samples // 10), args.seed) and ok
    print("accuracy:", "PASS" if ok else "FAIL")
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
