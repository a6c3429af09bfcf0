import math
from typing import Dict, Sequence

from bulkquery.config import DEFAULT_POLICY, ChunkingPolicy
from bulkquery.schemas import Chunk, ChunkStats, SizeIndicator, WordCountStatus
from bulkquery.textutils import count_words

TOKENS_PER_WORD = 4 / 3

# Recommended range for a whole pasted document.
LOW_DOCUMENT_WORDS = 1000
HIGH_DOCUMENT_WORDS = 6000


def estimate_tokens(words: int) -> int:
    return math.ceil(words * TOKENS_PER_WORD)


def size_indicator(word_count: int, policy: ChunkingPolicy = DEFAULT_POLICY) -> SizeIndicator:
    if word_count < policy.small_words:
        return "small"
    if word_count > policy.large_words:
        return "large"
    return "good"


def word_count_status(word_count: int) -> WordCountStatus:
    if word_count < LOW_DOCUMENT_WORDS:
        return "low"
    if word_count > HIGH_DOCUMENT_WORDS:
        return "high"
    return "good"


def size_indicators(chunks: Sequence[Chunk], policy: ChunkingPolicy = DEFAULT_POLICY) -> Dict[str, SizeIndicator]:
    return {c.id: size_indicator(c.word_count, policy) for c in chunks}


def compute_chunk_stats(chunks: Sequence[Chunk], task_prompt: str = "") -> ChunkStats:
    """
    Summarize chunk sizes and estimate the token cost of processing them.

    Every chunk is sent together with the task prompt; the output is assumed
    to be about as long as the chunk.
    """
    if not chunks:
        return ChunkStats()

    counts = [c.word_count for c in chunks]
    total = sum(counts)
    prompt_words = count_words(task_prompt)
    return ChunkStats(
        count=len(counts),
        total_words=total,
        avg_words=round(total / len(counts)),
        min_words=min(counts),
        max_words=max(counts),
        estimated_input_tokens=estimate_tokens(total + prompt_words * len(counts)),
        estimated_output_tokens=estimate_tokens(total),
    )
