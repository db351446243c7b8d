from __future__ import annotations

import argparse
import sys
from typing import List

from .config import (
    DEFAULT_CAPACITY,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_PROGRESS_EVERY,
    DEFAULT_WORKERS,
    ConfigError,
    SearchConfig,
)
from .siphash import HARNESS_KEY


def _fail(cmd: str, msg: object) -> int:
    print(f"{cmd}: {msg}", file=sys.stderr)
    return 1


def search_config(ns: argparse.Namespace) -> SearchConfig:
    return SearchConfig(
        max_words=ns.max_words,
        random_bytes=ns.rnd,
        verbose=ns.log,
        corpus_path=ns.corpus,
        workers=ns.workers,
        capacity=ns.capacity,
        max_iterations=ns.max_iterations,
        progress_every=ns.progress_every,
    )


def cmd_search(ns: argparse.Namespace) -> int:
    from .corpus import load_corpus
    from .generators import make_generator
    from .harness import Driver

    cfg = search_config(ns)
    try:
        cfg.validate()
        corpus = None if cfg.random_bytes else load_corpus(cfg.corpus_path)
        generator = make_generator(cfg, corpus)
    except ConfigError as exc:
        return _fail("search", exc)

    if corpus is not None and not ns.quiet:
        print(f"search: loaded {len(corpus)} words from {cfg.corpus_path}")

    driver = Driver(
        generator,
        key=HARNESS_KEY,
        workers=cfg.workers,
        capacity=cfg.capacity,
        max_iterations=cfg.max_iterations,
        progress_every=cfg.progress_every,
        verbose=cfg.verbose,
    )
    driver.run()
    return 0


def cmd_verify_core(_: argparse.Namespace) -> int:
    from .verify import REFERENCE_VECTORS, check_reference_vectors

    ok, bad = check_reference_vectors()
    for n, ours, ref in bad:
        print(f"SipHash-2-4(len={n}) -> FAIL")
        print(f"  ours={ours}\n  ref ={ref}")
    print(f"verify-core: {len(REFERENCE_VECTORS) - len(bad)}/{len(REFERENCE_VECTORS)} vectors")
    print("verify-core:", "PASS" if ok else "FAIL")
    return 0 if ok else 1


def cmd_bench(ns: argparse.Namespace) -> int:
    import random
    import time

    from .core import siphash24

    if ns.count < 1 or ns.length < 0:
        return _fail("bench", "--count must be >= 1 and --length >= 0")

    rng = random.Random(ns.seed)
    messages = [rng.randbytes(ns.length) for _ in range(ns.count)]
    k0, k1 = HARNESS_KEY

    if ns.engine == "numba":
        from .numba_siphash import pack_messages, siphash24_batch

        buf, offsets = pack_messages(messages)
        siphash24_batch(k0, k1, buf[: offsets[1]], offsets[:2])  # JIT warm-up
        start = time.perf_counter()
        siphash24_batch(k0, k1, buf, offsets)
        elapsed = time.perf_counter() - start
    else:
        start = time.perf_counter()
        for m in messages:
            siphash24(k0, k1, m)
        elapsed = time.perf_counter() - start

    rate = ns.count / elapsed if elapsed else 0.0
    mb = ns.count * ns.length / elapsed / 1e6 if elapsed else 0.0
    print(
        f"bench: engine={ns.engine} count={ns.count} length={ns.length} "
        f"time={elapsed:.3f}s rate={rate:.0f} hash/s ({mb:.2f} MB/s)"
    )
    return 0


def cmd_avalanche(ns: argparse.Namespace) -> int:
    from .analysis import avalanche

    try:
        rep = avalanche(ns.samples, ns.length, seed=ns.seed, engine=ns.engine)
    except ValueError as exc:
        return _fail("avalanche", exc)
    print(f"avalanche: samples={rep.samples} length={rep.length} bits_flipped={rep.samples * rep.length * 8}")
    print(f"avalanche: mean={rep.mean:.4f} min_bit={rep.min_bit_prob:.4f} max_bit={rep.max_bit_prob:.4f}")
    return 0


def cmd_build_wordlist(ns: argparse.Namespace) -> int:
    from .wordlist import build_wordlist

    try:
        words = build_wordlist(ns.paths, ns.out, jobs=ns.jobs)
    except OSError as exc:
        return _fail("build-wordlist", f"cannot save result to {ns.out}: {exc}")
    print(f"build-wordlist: wrote {len(words)} words to {ns.out}")
    return 0


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="siphashcoll")
    sub = p.add_subparsers(dest="cmd", required=True)

    s1 = sub.add_parser("search", help="random search for SipHash-2-4 collisions")
    s1.add_argument("corpus", nargs="?", default=None, help="JSON array of words (required without --rnd)")
    s1.add_argument("-n", dest="max_words", type=int, default=1, help="maximum number of words per phrase")
    s1.add_argument("--rnd", action="store_true", help="random strings over a 64-symbol ASCII alphabet")
    s1.add_argument("--log", action="store_true", help="print every generated pair (very slow)")
    s1.add_argument("--workers", type=int, default=DEFAULT_WORKERS)
    s1.add_argument("--capacity", type=int, default=DEFAULT_CAPACITY, help="bounded queue size")
    s1.add_argument("--max-iterations", type=int, default=DEFAULT_MAX_ITERATIONS)
    s1.add_argument("--progress-every", type=int, default=DEFAULT_PROGRESS_EVERY)
    s1.add_argument("--quiet", "-q", action="store_true")
    s1.set_defaults(func=cmd_search)

    s2 = sub.add_parser("verify-core", help="check SipHash-2-4 against the reference vectors")
    s2.set_defaults(func=cmd_verify_core)

    s3 = sub.add_parser("bench", help="hashing throughput")
    s3.add_argument("--engine", choices=["python", "numba"], default="python")
    s3.add_argument("--count", type=int, default=100_000)
    s3.add_argument("--length", type=int, default=32)
    s3.add_argument("--seed", type=int, default=None)
    s3.set_defaults(func=cmd_bench)

    s4 = sub.add_parser("avalanche", help="single-bit-flip statistics of the digest")
    s4.add_argument("--engine", choices=["python", "numba"], default="python")
    s4.add_argument("--samples", type=int, default=200)
    s4.add_argument("--length", type=int, default=16)
    s4.add_argument("--seed", type=int, default=None)
    s4.set_defaults(func=cmd_avalanche)

    s5 = sub.add_parser("build-wordlist", help="collect a sorted JSON word list from text files")
    s5.add_argument("paths", nargs="+", help="files or directories to scan")
    s5.add_argument("--out", "-o", default="words.json", help="output JSON file (merged if it exists)")
    s5.add_argument("--jobs", type=int, default=4, help="parser threads")
    s5.set_defaults(func=cmd_build_wordlist)

    args = p.parse_args(argv)
    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
