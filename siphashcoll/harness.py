"""
Collision search harness.

One producer (`Driver.run`) feeds random input pairs into a bounded queue;
a fixed pool of worker threads hashes both sides of each pair under the
harness key and reports pairs with equal digests but different bytes.
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, List, Optional

from .config import (
    DEFAULT_CAPACITY,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_PROGRESS_EVERY,
    DEFAULT_WORKERS,
)
from .core import siphash24
from .generators import Pair, PairGenerator
from .siphash import HARNESS_KEY, Hasher, Key

Emit = Callable[[str], None]

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def quote_bytes(data: bytes) -> str:
    """Double-quoted, escaped form of `data` (Go %q style); invalid UTF-8 becomes \\xNN."""
    out = ['"']
    for ch in data.decode("utf-8", "surrogateescape"):
        cp = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif 0xDC80 <= cp <= 0xDCFF:
            out.append(f"\\x{cp - 0xDC00:02x}")
        elif ch.isprintable():
            out.append(ch)
        elif cp < 0x80:
            out.append(f"\\x{cp:02x}")
        elif cp <= 0xFFFF:
            out.append(f"\\u{cp:04x}")
        else:
            out.append(f"\\U{cp:08x}")
    out.append('"')
    return "".join(out)


def format_collision(a: bytes, b: bytes) -> str:
    return f"Equal hash: {quote_bytes(a)} == {quote_bytes(b)}"


def check_pair(pair: Pair, key: Key = HARNESS_KEY, hasher: Hasher = siphash24) -> bool:
    """True only for a genuine collision: equal digests over different bytes."""
    a, b = pair
    k0, k1 = key
    if hasher(k0, k1, a) != hasher(k0, k1, b):
        return False
    return a != b


class CollisionWorkerPool:
    """
    Fixed set of daemon threads draining `pairs`.

    A `None` item stops one worker. Workers only read the key and the pairs
    they dequeue, so no locking beyond the queue itself is needed.
    """

    def __init__(
        self,
        pairs: "queue.Queue[Optional[Pair]]",
        *,
        key: Key = HARNESS_KEY,
        workers: int = DEFAULT_WORKERS,
        verbose: bool = False,
        emit: Emit = print,
        hasher: Hasher = siphash24,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.pairs = pairs
        self.key = key
        self.workers = workers
        # verbose prints every pair; only for debugging, it dominates run time
        self.verbose = verbose
        self.emit = emit
        self.hasher = hasher
        self.collisions = 0
        self.errors = 0
        self._count_lock = threading.Lock()
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for i in range(self.workers):
            t = threading.Thread(target=self._work, name=f"siphashcoll-worker-{i}", daemon=True)
            t.start()
            self._threads.append(t)

    def _work(self) -> None:
        while True:
            pair = self.pairs.get()
            try:
                if pair is None:
                    return
                self.process(pair)
            except Exception as exc:
                # a dead worker would leave Driver.run waiting in queue.join() forever
                with self._count_lock:
                    self.errors += 1
                self.emit(f"worker: failed on pair {quote_bytes(pair[0])}, {quote_bytes(pair[1])}: {exc!r}")
            finally:
                self.pairs.task_done()

    def process(self, pair: Pair) -> bool:
        a, b = pair
        if self.verbose:
            self.emit(f"{a.decode('utf-8', 'replace')} {b.decode('utf-8', 'replace')}")
        if not check_pair(pair, self.key, self.hasher):
            return False
        with self._count_lock:
            self.collisions += 1
        self.emit(format_collision(a, b))
        return True

    def close(self) -> None:
        for _ in self._threads:
            self.pairs.put(None)
        for t in self._threads:
            t.join()
        self._threads = []


class Driver:
    """Single producer: generate, enqueue (blocking when full), count, report progress."""

    def __init__(
        self,
        generator: PairGenerator,
        *,
        key: Key = HARNESS_KEY,
        workers: int = DEFAULT_WORKERS,
        capacity: int = DEFAULT_CAPACITY,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        verbose: bool = False,
        emit: Emit = print,
        hasher: Hasher = siphash24,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.generator = generator
        self.max_iterations = max_iterations
        self.progress_every = progress_every
        self.emit = emit
        self.queue: "queue.Queue[Optional[Pair]]" = queue.Queue(maxsize=capacity)
        self.pool = CollisionWorkerPool(
            self.queue,
            key=key,
            workers=workers,
            verbose=verbose,
            emit=emit,
            hasher=hasher,
        )
        self.count = 0

    def enqueue(self, pair: Pair) -> None:
        self.queue.put(pair)
        self.count += 1

    def run(self) -> int:
        self.pool.start()
        while self.count < self.max_iterations:
            if self.count % self.progress_every == 0:
                self.emit(str(self.count))
            self.enqueue(self.generator())
        self.queue.join()
        self.pool.close()
        self.emit("Done!")
        return self.count
