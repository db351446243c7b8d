from __future__ import annotations

import json
import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Set, Tuple

TEXT_EXTENSIONS = frozenset({".go", ".txt", ".s", ".xml", ".html", ".htm", ".js", ".css"})
MAX_WORD_BYTES = 255
PARSE_JOBS = 4

# ASCII alphanumerics plus @ - _ . and basic Cyrillic (А..я, Ё, ё); anything else separates words
_WORD_RE = re.compile(r"[0-9A-Za-z@\-_.А-яЁё]+")

Emit = Callable[[str], None]


def tokenize(text: str) -> Iterator[str]:
    for m in _WORD_RE.finditer(text):
        w = m.group(0)
        if len(w.encode("utf-8")) <= MAX_WORD_BYTES:
            yield w


def iter_text_files(roots: Iterable[str | Path]) -> Iterator[Path]:
    for root in roots:
        root = Path(root)
        if root.is_file():
            if root.suffix in TEXT_EXTENSIONS:
                yield root
            continue
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in sorted(filenames):
                p = Path(dirpath) / name
                if p.suffix in TEXT_EXTENSIONS and p.is_file():
                    yield p


def parse_file(path: Path) -> Set[str]:
    # undecodable bytes become U+FFFD, which is a separator
    with path.open("r", encoding="utf-8", errors="replace") as fh:
        return set(tokenize(fh.read()))


def load_existing(path: Path) -> Optional[List[str]]:
    """Previously written word list, or None when there is nothing usable to merge into."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(data, list) or any(not isinstance(w, str) for w in data):
        return None
    return data


def collect_words(
    roots: Iterable[str | Path],
    *,
    jobs: int = PARSE_JOBS,
    emit: Emit = print,
) -> Tuple[Set[str], int]:
    """Parse every matching file under `roots`. Returns (words, failed_file_count)."""
    files = list(iter_text_files(roots))
    words: Set[str] = set()
    failed = 0

    def _safe_parse(p: Path) -> Tuple[Path, Optional[Set[str]], Optional[OSError]]:
        try:
            return p, parse_file(p), None
        except OSError as exc:
            return p, None, exc

    with ThreadPoolExecutor(max_workers=max(1, jobs)) as ex:
        for p, found, err in ex.map(_safe_parse, files):
            if found is None:
                emit(f"build-wordlist: cannot read {p}: {err}")
                failed += 1
                continue
            words |= found
            emit(str(p))
    return words, failed


def write_wordlist(path: Path, words: Iterable[str]) -> List[str]:
    ordered = sorted(set(words))
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(ordered, fh, ensure_ascii=False)
        fh.write("\n")
    return ordered


def build_wordlist(
    roots: Iterable[str | Path],
    out: str | Path = "words.json",
    *,
    jobs: int = PARSE_JOBS,
    emit: Emit = print,
) -> List[str]:
    out = Path(out)
    existing = load_existing(out) if out.exists() else None
    if existing is None:
        emit(f"build-wordlist: creating new dictionary {out}")
        existing = []
    else:
        emit(f"build-wordlist: adding to dictionary {out}")
    words, _failed = collect_words(roots, jobs=jobs, emit=emit)
    return write_wordlist(out, words.union(existing))
