import itertools
import queue
import random
import threading
import unittest

from siphashcoll.core import siphash24
from siphashcoll.generators import ByteGenerator
from siphashcoll.harness import (
    CollisionWorkerPool,
    Driver,
    check_pair,
    format_collision,
    quote_bytes,
)
from siphashcoll.siphash import HARNESS_KEY


def _const_hasher(k0: int, k1: int, data: bytes) -> int:
    return 42


class _Lines:
    def __init__(self) -> None:
        self.lines = []
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        with self._lock:
            self.lines.append(line)


class TestQuoting(unittest.TestCase):
    def test_quote_bytes(self) -> None:
        self.assertEqual(quote_bytes(b"abc"), '"abc"')
        self.assertEqual(quote_bytes(b'a"b\\c'), '"a\\"b\\\\c"')
        self.assertEqual(quote_bytes(b"x\ny\tz"), '"x\\ny\\tz"')
        self.assertEqual(quote_bytes(b"\x00\x7f"), '"\\x00\\x7f"')
        self.assertEqual(quote_bytes(b"\xff"), '"\\xff"')
        self.assertEqual(quote_bytes("ёж".encode("utf-8")), '"ёж"')

    def test_format_collision(self) -> None:
        self.assertEqual(format_collision(b"a b", b"c\n"), 'Equal hash: "a b" == "c\\n"')


class TestCheckPair(unittest.TestCase):
    def test_identical_inputs_are_not_collisions(self) -> None:
        self.assertFalse(check_pair((b"same", b"same")))
        self.assertFalse(check_pair((b"same", b"same"), hasher=_const_hasher))

    def test_different_digests(self) -> None:
        self.assertFalse(check_pair((b"a", b"b")))

    def test_equal_digest_different_bytes(self) -> None:
        self.assertTrue(check_pair((b"a", b"b"), hasher=_const_hasher))

    def test_uses_harness_key(self) -> None:
        seen = []

        def hasher(k0: int, k1: int, data: bytes) -> int:
            seen.append((k0, k1))
            return siphash24(k0, k1, data)

        check_pair((b"a", b"b"), hasher=hasher)
        self.assertEqual(seen, [HARNESS_KEY, HARNESS_KEY])


class TestWorkerPool(unittest.TestCase):
    def _run_pool(self, pairs, **kw):
        q = queue.Queue(maxsize=10)
        out = _Lines()
        pool = CollisionWorkerPool(q, workers=2, emit=out, **kw)
        pool.start()
        for p in pairs:
            q.put(p)
        q.join()
        pool.close()
        return pool, out.lines

    def test_no_self_collision_report(self) -> None:
        pool, lines = self._run_pool([(b"abc", b"abc"), (b"", b""), (b"x", b"y")])
        self.assertEqual(lines, [])
        self.assertEqual(pool.collisions, 0)

    def test_forced_collision_reported(self) -> None:
        pool, lines = self._run_pool([(b"a", b"a"), (b"a", b"b")], hasher=_const_hasher)
        self.assertEqual(lines, ['Equal hash: "a" == "b"'])
        self.assertEqual(pool.collisions, 1)

    def test_verbose_prints_every_pair(self) -> None:
        _, lines = self._run_pool([(b"one", b"two"), (b"three", b"four")], verbose=True)
        self.assertEqual(sorted(lines), ["one two", "three four"])

    def test_close_stops_threads(self) -> None:
        q = queue.Queue()
        pool = CollisionWorkerPool(q, workers=3, emit=lambda s: None)
        pool.start()
        threads = list(pool._threads)
        self.assertEqual(len(threads), 3)
        pool.close()
        self.assertTrue(all(not t.is_alive() for t in threads))

    def test_double_start_rejected(self) -> None:
        pool = CollisionWorkerPool(queue.Queue(), workers=1, emit=lambda s: None)
        pool.start()
        with self.assertRaises(RuntimeError):
            pool.start()
        pool.close()

    def test_bad_worker_count(self) -> None:
        with self.assertRaises(ValueError):
            CollisionWorkerPool(queue.Queue(), workers=0)


class TestDriver(unittest.TestCase):
    def test_progress_and_done(self) -> None:
        out = _Lines()
        d = Driver(
            ByteGenerator(random.Random(1)),
            workers=2,
            max_iterations=50,
            progress_every=20,
            emit=out,
        )
        self.assertEqual(d.run(), 50)
        self.assertEqual(out.lines, ["0", "20", "40", "Done!"])
        self.assertTrue(d.queue.empty())

    def test_zero_iterations(self) -> None:
        out = _Lines()
        d = Driver(ByteGenerator(random.Random(1)), max_iterations=0, emit=out)
        self.assertEqual(d.run(), 0)
        self.assertEqual(out.lines, ["Done!"])

    def test_every_pair_consumed_once(self) -> None:
        counter = itertools.count()
        seen = []
        lock = threading.Lock()

        def gen():
            n = next(counter)
            return (b"a%d" % n, b"b%d" % n)

        def hasher(k0: int, k1: int, data: bytes) -> int:
            if data.startswith(b"a"):
                with lock:
                    seen.append(data)
            return siphash24(k0, k1, data)

        d = Driver(gen, workers=4, capacity=3, max_iterations=300, progress_every=1000, hasher=hasher, emit=lambda s: None)
        d.run()
        self.assertEqual(len(seen), 300)
        self.assertEqual(sorted(seen), sorted(b"a%d" % n for n in range(300)))

    def test_collisions_reach_output(self) -> None:
        out = _Lines()
        pairs = iter([(b"p", b"q"), (b"r", b"r")])
        d = Driver(lambda: next(pairs), workers=1, max_iterations=2, progress_every=10, hasher=_const_hasher, emit=out)
        d.run()
        self.assertEqual(out.lines, ["0", 'Equal hash: "p" == "q"', "Done!"])

    def test_backpressure_blocks_instead_of_dropping(self) -> None:
        # capacity 1 and no workers started: the second enqueue must wait
        d = Driver(lambda: (b"", b""), capacity=1, emit=lambda s: None)
        first = (b"first", b"1")
        second = (b"second", b"2")
        d.enqueue(first)

        t = threading.Thread(target=d.enqueue, args=(second,), daemon=True)
        t.start()
        t.join(0.3)
        self.assertTrue(t.is_alive())
        self.assertEqual(d.queue.qsize(), 1)
        self.assertEqual(d.count, 1)

        self.assertIs(d.queue.get(), first)
        d.queue.task_done()
        t.join(2.0)
        self.assertFalse(t.is_alive())
        self.assertIs(d.queue.get_nowait(), second)
        self.assertEqual(d.count, 2)

    def test_hasher_error_does_not_stall_run(self) -> None:
        out = _Lines()

        def hasher(k0: int, k1: int, data: bytes) -> int:
            if data == b"bad":
                raise RuntimeError("boom")
            return siphash24(k0, k1, data)

        pairs = iter([(b"bad", b"x"), (b"y", b"z"), (b"bad", b"w")])
        d = Driver(lambda: next(pairs), workers=1, max_iterations=3, progress_every=10, hasher=hasher, emit=out)
        self.assertEqual(d.run(), 3)
        self.assertEqual(d.pool.errors, 2)
        self.assertEqual(out.lines[-1], "Done!")
        failures = [line for line in out.lines if line.startswith("worker: failed on pair")]
        self.assertEqual(len(failures), 2)
        self.assertIn("RuntimeError('boom')", failures[0])

    def test_bad_capacity(self) -> None:
        with self.assertRaises(ValueError):
            Driver(lambda: (b"", b""), capacity=0)


if __name__ == "__main__":
    unittest.main()
