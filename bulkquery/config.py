"""Environment-driven settings shared by the chunking and processing layers."""

import os
from dataclasses import dataclass

CHUNKER_MODEL = os.getenv("CHUNKER_MODEL", "gpt-4o-mini")
PROCESS_MODEL = os.getenv("PROCESS_MODEL", "gpt-4o-mini")

# "openai", "http" or "none"
CHUNK_ORACLE = os.getenv("CHUNK_ORACLE", "openai").strip().lower()
CHUNK_ORACLE_URL = os.getenv("CHUNK_ORACLE_URL")
CHUNK_ORACLE_API_KEY = os.getenv("CHUNK_ORACLE_API_KEY")
CHUNK_ORACLE_TIMEOUT = float(os.getenv("CHUNK_ORACLE_TIMEOUT", "60"))

PROCESS_MAX_WORKERS = int(os.getenv("PROCESS_MAX_WORKERS", "4"))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class ChunkingPolicy:
    """
    Word-count thresholds used by the builder, the editor and the size report.

    Attributes:
        min_paragraph_words: Paragraphs at or below this count are skipped by
            the local builder.
        min_split_words: Smallest chunk the midpoint split accepts.
        anchor_words: Words copied into the `start` / `end` anchors.
        small_words: Chunks below this count are reported as small.
        large_words: Chunks above this count are reported as large.
        hard_max_words: Upper bound quoted to the chunking oracle.
    """

    min_paragraph_words: int = 50
    min_split_words: int = 100
    anchor_words: int = 7
    small_words: int = 150
    large_words: int = 750
    hard_max_words: int = 1125

    def __post_init__(self) -> None:
        if self.anchor_words < 1:
            raise ValueError("anchor_words must be at least 1")
        if self.small_words > self.large_words:
            raise ValueError("small_words must not exceed large_words")
        if self.large_words > self.hard_max_words:
            raise ValueError("large_words must not exceed hard_max_words")

    @classmethod
    def from_env(cls) -> "ChunkingPolicy":
        return cls(
            min_paragraph_words=_env_int("CHUNK_MIN_PARAGRAPH_WORDS", cls.min_paragraph_words),
            min_split_words=_env_int("CHUNK_MIN_SPLIT_WORDS", cls.min_split_words),
            anchor_words=_env_int("CHUNK_ANCHOR_WORDS", cls.anchor_words),
            small_words=_env_int("CHUNK_SMALL_WORDS", cls.small_words),
            large_words=_env_int("CHUNK_LARGE_WORDS", cls.large_words),
            hard_max_words=_env_int("CHUNK_HARD_MAX_WORDS", cls.hard_max_words),
        )


DEFAULT_POLICY = ChunkingPolicy.from_env()
