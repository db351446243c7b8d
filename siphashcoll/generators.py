from __future__ import annotations

import random
from typing import Callable, Optional, Sequence, Tuple

from .config import SearchConfig
from .corpus import CorpusError

Pair = Tuple[bytes, bytes]
PairGenerator = Callable[[], Pair]

# 64 printable symbols; a 6-bit index reaches every entry, newline included.
SYMBOLS = b" 0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz\n"
SEPARATORS = b" \t\n"

assert len(SYMBOLS) == 64

# bytes.translate table: raw byte -> SYMBOLS[byte & 0x3f]
_SYMBOL_TABLE = bytes(SYMBOLS[b & 0x3F] for b in range(256))


def _system_rng() -> random.Random:
    return random.SystemRandom()


class ByteGenerator:
    """Random printable strings of 1..255 bytes per side."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else _system_rng()

    def side(self) -> bytes:
        n = self.rng.getrandbits(8) or 1
        return self.rng.randbytes(n).translate(_SYMBOL_TABLE)

    def __call__(self) -> Pair:
        return (self.side(), self.side())


class PhraseGenerator:
    """
    Random phrases of 1..max_words corpus words.

    Every draw is a 64-bit random value reduced modulo the range, so the
    distribution carries the same small modulo bias for ranges that are not
    powers of two.
    """

    def __init__(self, corpus: Sequence[str], max_words: int = 1, rng: Optional[random.Random] = None) -> None:
        if not corpus:
            raise CorpusError("the word corpus is empty")
        if max_words < 1:
            raise ValueError(f"max_words must be >= 1, got {max_words}")
        self.words = tuple(w.encode("utf-8") for w in corpus)
        self.max_words = max_words
        self.rng = rng if rng is not None else _system_rng()

    def side(self) -> bytes:
        getrandbits = self.rng.getrandbits
        count = getrandbits(64) % self.max_words + 1
        out = bytearray()
        for n in range(count):
            out += self.words[getrandbits(64) % len(self.words)]
            if n < count - 1:
                out.append(SEPARATORS[getrandbits(64) % len(SEPARATORS)])
        return bytes(out)

    def __call__(self) -> Pair:
        return (self.side(), self.side())


def make_generator(
    config: SearchConfig,
    corpus: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
) -> PairGenerator:
    if config.random_bytes:
        return ByteGenerator(rng)
    if corpus is None:
        raise CorpusError("phrase mode needs a word corpus")
    return PhraseGenerator(corpus, config.max_words, rng)
