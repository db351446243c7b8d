from __future__ import annotations

from typing import Callable, Tuple

from .core import MASK64, siphash24

Key = Tuple[int, int]
Hasher = Callable[[int, int, bytes], int]

# Fixed test key for the collision harness; not a secret.
HARNESS_KEY: Key = (0xDDA7806A4847EC61, 0xB5940C2623A5AABD)


def key_from_bytes(key: bytes) -> Key:
    if len(key) != 16:
        raise ValueError("SipHash key must be exactly 16 bytes")
    return (int.from_bytes(key[:8], "little"), int.from_bytes(key[8:], "little"))


def key_to_bytes(key: Key) -> bytes:
    return (key[0] & MASK64).to_bytes(8, "little") + (key[1] & MASK64).to_bytes(8, "little")


def parse_key_hex(hexstr: str) -> Key:
    s = hexstr.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if len(s) != 32 or any(ch not in "0123456789abcdef" for ch in s):
        raise ValueError("key must be 32 hex characters")
    return key_from_bytes(bytes.fromhex(s))


def siphash24_bytes(data: bytes, key: Key = HARNESS_KEY) -> bytes:
    # byte order of the published reference vectors
    return siphash24(key[0], key[1], data).to_bytes(8, "little")


def siphash24_hex(data: bytes, key: Key = HARNESS_KEY) -> str:
    return siphash24_bytes(data, key).hex()
