import json
import tempfile
import unittest
from pathlib import Path

from siphashcoll.corpus import load_corpus
from siphashcoll.wordlist import build_wordlist, iter_text_files, load_existing, tokenize


def _quiet(_: str) -> None:
    pass


class TestTokenize(unittest.TestCase):
    def test_word_characters(self) -> None:
        text = "Hello, мир! foo-bar x@y.z ёлка Ёж snake_case 日本語 a:b"
        self.assertEqual(
            list(tokenize(text)),
            ["Hello", "мир", "foo-bar", "x@y.z", "ёлка", "Ёж", "snake_case", "a", "b"],
        )

    def test_replacement_char_separates(self) -> None:
        self.assertEqual(list(tokenize("ab�cd")), ["ab", "cd"])

    def test_long_words_dropped(self) -> None:
        self.assertEqual(list(tokenize("a" * 255 + " ok " + "b" * 256)), ["a" * 255, "ok"])
        # 128 Cyrillic letters are 256 UTF-8 bytes
        self.assertEqual(list(tokenize("я" * 128)), [])
        self.assertEqual(list(tokenize("я" * 127)), ["я" * 127])


class TestBuildWordlist(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        src = self.tmp / "src"
        (src / "sub").mkdir(parents=True)
        (src / "a.txt").write_text("zeta alpha zeta", encoding="utf-8")
        (src / "sub" / "b.go").write_text("package main // Привет", encoding="utf-8")
        (src / "sub" / "c.html").write_bytes(b"<p>caf\xff\xfee</p>")
        (src / "skip.py").write_text("ignored words", encoding="utf-8")
        self.src = src

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_file_selection(self) -> None:
        names = sorted(p.name for p in iter_text_files([self.src]))
        self.assertEqual(names, ["a.txt", "b.go", "c.html"])

    def test_build_new(self) -> None:
        out = self.tmp / "words.json"
        words = build_wordlist([self.src], out, emit=_quiet)
        expected = sorted(["zeta", "alpha", "package", "main", "Привет", "p", "caf", "e"])
        self.assertEqual(words, expected)
        self.assertEqual(json.loads(out.read_text(encoding="utf-8")), expected)
        self.assertIn("Привет", out.read_text(encoding="utf-8"))
        # the result is a valid harness corpus
        self.assertEqual(load_corpus(out), tuple(expected))

    def test_merge_existing(self) -> None:
        out = self.tmp / "words.json"
        out.write_text(json.dumps(["alpha", "omega"]), encoding="utf-8")
        words = build_wordlist([self.src / "a.txt"], out, emit=_quiet)
        self.assertEqual(words, ["alpha", "omega", "zeta"])

    def test_unusable_existing_file_is_replaced(self) -> None:
        out = self.tmp / "words.json"
        out.write_text("garbage", encoding="utf-8")
        self.assertIsNone(load_existing(out))
        lines = []
        words = build_wordlist([self.src / "a.txt"], out, emit=lines.append)
        self.assertEqual(words, ["alpha", "zeta"])
        self.assertIn(f"build-wordlist: creating new dictionary {out}", lines)


if __name__ == "__main__":
    unittest.main()
