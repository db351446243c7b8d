from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .core import siphash24
from .siphash import HARNESS_KEY, Key


@dataclass
class AvalancheReport:
    samples: int
    length: int
    mean: float  # mean fraction of output bits flipped per single input-bit flip
    min_bit_prob: float
    max_bit_prob: float
    bit_probs: np.ndarray  # shape (64,), flip probability of each output bit


def _digests(key: Key, messages: List[bytes], engine: str) -> np.ndarray:
    if engine == "numba":
        from .numba_siphash import pack_messages, siphash24_batch

        buf, offsets = pack_messages(messages)
        return siphash24_batch(key[0], key[1], buf, offsets)
    if engine != "python":
        raise ValueError(f"unknown engine: {engine}")
    return np.array([siphash24(key[0], key[1], m) for m in messages], dtype=np.uint64)


def flip_bit(data: bytes, bit: int) -> bytes:
    out = bytearray(data)
    out[bit >> 3] ^= 1 << (bit & 7)
    return bytes(out)


def avalanche(
    samples: int,
    length: int,
    *,
    key: Key = HARNESS_KEY,
    seed: Optional[int] = None,
    engine: str = "python",
) -> AvalancheReport:
    """
    Flip every input bit of `samples` random messages of `length` bytes and
    measure how the 64 digest bits respond.
    """
    if samples < 1 or length < 1:
        raise ValueError("samples and length must be >= 1")
    rng = random.Random(seed)
    nbits = length * 8

    base: List[bytes] = []
    flipped: List[bytes] = []
    for _ in range(samples):
        m = rng.randbytes(length)
        base.append(m)
        flipped.extend(flip_bit(m, i) for i in range(nbits))

    h0 = _digests(key, base, engine)
    h1 = _digests(key, flipped, engine)
    diff = np.repeat(h0, nbits) ^ h1

    # (N, 64) matrix of changed output bits, bit 0 = least significant
    bits = np.unpackbits(diff.astype("<u8").view(np.uint8).reshape(-1, 8), axis=1, bitorder="little")
    bit_probs = bits.mean(axis=0)
    return AvalancheReport(
        samples=samples,
        length=length,
        mean=float(bits.mean()),
        min_bit_prob=float(bit_probs.min()),
        max_bit_prob=float(bit_probs.max()),
        bit_probs=bit_probs,
    )
