import pytest

from bulkquery.domain.chunking import compute_chunk_stats, size_indicator, size_indicators, word_count_status
from bulkquery.domain.chunking.stats import estimate_tokens
from bulkquery.schemas import ChunkStats


def test_stats_for_a_sequence(chunk, paragraph):
    chunks = [chunk(paragraph(60)), chunk(paragraph(80))]

    stats = compute_chunk_stats(chunks, task_prompt="Make three flashcards")

    assert stats.count == 2
    assert stats.total_words == 140
    assert stats.avg_words == 70
    assert (stats.min_words, stats.max_words) == (60, 80)
    # 140 chunk words plus the 3-word prompt sent with each chunk
    assert stats.estimated_input_tokens == 195
    assert stats.estimated_output_tokens == 187


def test_empty_sequence_has_zero_stats():
    assert compute_chunk_stats([]) == ChunkStats()


def test_token_estimate_rounds_up():
    assert estimate_tokens(0) == 0
    assert estimate_tokens(10) == 14


@pytest.mark.parametrize(
    "words, expected",
    [(0, "small"), (149, "small"), (150, "good"), (750, "good"), (751, "large")],
)
def test_size_indicator_thresholds(words, expected):
    assert size_indicator(words) == expected


@pytest.mark.parametrize(
    "words, expected",
    [(999, "low"), (1000, "good"), (6000, "good"), (6001, "high")],
)
def test_document_word_count_status(words, expected):
    assert word_count_status(words) == expected


def test_indicators_are_keyed_by_chunk_id(chunk, paragraph):
    small, good = chunk(paragraph(20)), chunk(paragraph(200, 2))

    assert size_indicators([small, good]) == {small.id: "small", good.id: "good"}
