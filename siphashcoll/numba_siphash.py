"""
SipHash-2-4 batch hashing compiled with Numba.

Messages are packed into one contiguous uint8 buffer with an int64 offsets
array (message i is buf[offsets[i]:offsets[i + 1]]), so a single JIT call can
hash many inputs of different lengths. Results match `core.siphash24`
bit for bit.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
from numba import njit

from .core import MASK64, SIP_C0, SIP_C1, SIP_C2, SIP_C3


@njit(cache=True, inline="always")
def _rotl(x: np.uint64, n: int) -> np.uint64:
    return (x << np.uint64(n)) | (x >> np.uint64(64 - n))


@njit(cache=True, inline="always")
def _sip_round(v0: np.uint64, v1: np.uint64, v2: np.uint64, v3: np.uint64):
    v0 = v0 + v1
    v1 = _rotl(v1, 13) ^ v0
    v0 = _rotl(v0, 32)

    v2 = v2 + v3
    v3 = _rotl(v3, 16) ^ v2

    v0 = v0 + v3
    v3 = _rotl(v3, 21) ^ v0

    v2 = v2 + v1
    v1 = _rotl(v1, 17) ^ v2
    v2 = _rotl(v2, 32)
    return v0, v1, v2, v3


@njit(cache=True)
def _siphash24_one(k0: np.uint64, k1: np.uint64, buf: np.ndarray, start: int, end: int) -> np.uint64:
    v0 = k0 ^ np.uint64(SIP_C0)
    v1 = k1 ^ np.uint64(SIP_C1)
    v2 = k0 ^ np.uint64(SIP_C2)
    v3 = k1 ^ np.uint64(SIP_C3)

    n = end - start
    full_end = start + n - (n & 7)
    p = start
    while p < full_end:
        m = np.uint64(0)
        for j in range(8):
            m |= np.uint64(buf[p + j]) << np.uint64(8 * j)
        v3 ^= m
        v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
        v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
        v0 ^= m
        p += 8

    b = np.uint64(n & 0xFF) << np.uint64(56)
    j = 0
    while p < end:
        b |= np.uint64(buf[p]) << np.uint64(8 * j)
        p += 1
        j += 1
    v3 ^= b
    v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
    v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
    v0 ^= b

    v2 ^= np.uint64(0xFF)
    for _ in range(4):
        v0, v1, v2, v3 = _sip_round(v0, v1, v2, v3)
    return v0 ^ v1 ^ v2 ^ v3


@njit(cache=True)
def _siphash24_batch(k0: np.uint64, k1: np.uint64, buf: np.ndarray, offsets: np.ndarray) -> np.ndarray:
    count = offsets.shape[0] - 1
    out = np.empty(count, dtype=np.uint64)
    for i in range(count):
        out[i] = _siphash24_one(k0, k1, buf, offsets[i], offsets[i + 1])
    return out


def pack_messages(messages: Sequence[bytes]) -> Tuple[np.ndarray, np.ndarray]:
    offsets = np.zeros(len(messages) + 1, dtype=np.int64)
    if messages:
        offsets[1:] = np.cumsum([len(m) for m in messages])
    joined = b"".join(messages)
    if joined:
        buf = np.frombuffer(joined, dtype=np.uint8).copy()
    else:
        buf = np.zeros(0, dtype=np.uint8)
    return buf, offsets


def siphash24_batch(k0: int, k1: int, buf: np.ndarray, offsets: np.ndarray) -> np.ndarray:
    """Hash every packed message; returns a uint64 array of len(offsets) - 1."""
    return _siphash24_batch(
        np.uint64(k0 & MASK64),
        np.uint64(k1 & MASK64),
        np.ascontiguousarray(buf, dtype=np.uint8),
        np.ascontiguousarray(offsets, dtype=np.int64),
    )


def siphash24_many(k0: int, k1: int, messages: Sequence[bytes]) -> List[int]:
    buf, offsets = pack_messages(messages)
    return [int(x) for x in siphash24_batch(k0, k1, buf, offsets)]
