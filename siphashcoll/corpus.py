from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Tuple, Union

from .config import ConfigError

Corpus = Tuple[str, ...]


class CorpusError(ConfigError):
    pass


def parse_corpus(text: str, source: str = "<corpus>") -> Corpus:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CorpusError(f"{source}: not valid JSON: {exc}") from exc
    if not isinstance(data, list) or any(not isinstance(w, str) for w in data):
        raise CorpusError(f"{source}: expected a JSON array of strings")
    if not data:
        raise CorpusError(f"{source}: the JSON word array is empty")
    return tuple(_replace_lone_surrogates(w) for w in data)


def _replace_lone_surrogates(word: str) -> str:
    # JSON allows unpaired \ud800-style escapes; they become U+FFFD so every word encodes as UTF-8
    try:
        word.encode("utf-8")
    except UnicodeEncodeError:
        return word.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
    return word


def load_corpus(path: Optional[Union[str, Path]]) -> Corpus:
    """Load the phrase-mode word list. Every failure is a fatal CorpusError."""
    if not path:
        raise CorpusError("a JSON word list file is required in phrase mode")
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusError(f"{p}: cannot read word list: {exc}") from exc
    return parse_corpus(text, str(p))
