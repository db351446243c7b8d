from __future__ import annotations

from typing import Tuple

MASK64 = 0xFFFFFFFFFFFFFFFF

# "somepseu", "dorandom", "lygenera", "tedbytes" read as little-endian words
SIP_C0 = 0x736F6D6570736575
SIP_C1 = 0x646F72616E646F6D
SIP_C2 = 0x6C7967656E657261
SIP_C3 = 0x7465646279746573

C_ROUNDS = 2
D_ROUNDS = 4

State = Tuple[int, int, int, int]


def u64(x: int) -> int:
    return x & MASK64


def rotl(x: int, n: int) -> int:
    x &= MASK64
    return ((x << n) | (x >> (64 - n))) & MASK64


def init_state(k0: int, k1: int) -> State:
    k0 &= MASK64
    k1 &= MASK64
    return (k0 ^ SIP_C0, k1 ^ SIP_C1, k0 ^ SIP_C2, k1 ^ SIP_C3)


def sip_round(v: State) -> State:
    v0, v1, v2, v3 = v

    v0 = (v0 + v1) & MASK64
    v1 = rotl(v1, 13) ^ v0
    v0 = rotl(v0, 32)

    v2 = (v2 + v3) & MASK64
    v3 = rotl(v3, 16) ^ v2

    v0 = (v0 + v3) & MASK64
    v3 = rotl(v3, 21) ^ v0

    v2 = (v2 + v1) & MASK64
    v1 = rotl(v1, 17) ^ v2
    v2 = rotl(v2, 32)

    return (v0, v1, v2, v3)


def compress_word(v: State, m: int) -> State:
    """Mix one 64-bit message word: v3 ^= m, C_ROUNDS rounds, v0 ^= m."""
    v0, v1, v2, v3 = v
    v = (v0, v1, v2, v3 ^ m)
    for _ in range(C_ROUNDS):
        v = sip_round(v)
    return (v[0] ^ m, v[1], v[2], v[3])


def last_word(data: bytes) -> int:
    # trailing 0..7 bytes in the low end, total length mod 256 in the top byte
    tail = len(data) & 7
    b = (len(data) & 0xFF) << 56
    if tail:
        b |= int.from_bytes(data[len(data) - tail :], "little")
    return b


def finalize(v: State) -> int:
    v0, v1, v2, v3 = v
    v = (v0, v1, v2 ^ 0xFF, v3)
    for _ in range(D_ROUNDS):
        v = sip_round(v)
    return v[0] ^ v[1] ^ v[2] ^ v[3]


def siphash24(k0: int, k1: int, data: bytes) -> int:
    """
    SipHash-2-4 of `data` under the 128-bit key (k0, k1).

    Returns the 64-bit digest as an unsigned int. Any byte string is valid
    input, including the empty one.
    """
    v = init_state(k0, k1)
    end = len(data) - (len(data) & 7)
    for off in range(0, end, 8):
        v = compress_word(v, int.from_bytes(data[off : off + 8], "little"))
    v = compress_word(v, last_word(data))
    return finalize(v)
