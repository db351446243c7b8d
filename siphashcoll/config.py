from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_WORKERS = 4
DEFAULT_CAPACITY = 100
DEFAULT_MAX_ITERATIONS = (1 << 32) + 1
DEFAULT_PROGRESS_EVERY = 10_000_000


class ConfigError(Exception):
    """Fatal setup problem; the run is aborted, never retried."""


@dataclass(frozen=True)
class SearchConfig:
    max_words: int = 1
    random_bytes: bool = False
    verbose: bool = False
    corpus_path: Optional[str] = None
    workers: int = DEFAULT_WORKERS
    capacity: int = DEFAULT_CAPACITY
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    progress_every: int = DEFAULT_PROGRESS_EVERY

    @property
    def phrase_mode(self) -> bool:
        return not self.random_bytes

    def validate(self) -> None:
        if self.phrase_mode and not self.corpus_path:
            raise ConfigError("a JSON word list file is required unless --rnd is given")
        if self.max_words < 1:
            raise ConfigError(f"maximum words per phrase must be >= 1, got {self.max_words}")
        if self.workers < 1:
            raise ConfigError(f"--workers must be >= 1, got {self.workers}")
        if self.capacity < 1:
            raise ConfigError(f"--capacity must be >= 1, got {self.capacity}")
        if self.max_iterations < 0:
            raise ConfigError(f"--max-iterations must be >= 0, got {self.max_iterations}")
        if self.progress_every < 1:
            raise ConfigError(f"--progress-every must be >= 1, got {self.progress_every}")
