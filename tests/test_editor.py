"""Tests for merge, midpoint split, segment-boundary split and selection."""

import pytest

from bulkquery.domain.chunking import (
    ChunkNotFoundError,
    ChunkTooSmallError,
    InvalidBoundaryError,
    NoBoundariesError,
    NotAdjacentError,
    SelectionError,
    SingleLineChunkError,
    chunk_locally,
    interactive_split,
    merge_chunks,
    merge_selected,
    segment_text,
    split_chunk,
    toggle_selection,
    validate_sequence,
)


@pytest.fixture
def sequence(chunk, paragraph):
    return [
        chunk(paragraph(60, 3, tag="a"), lines=(1, 3), title="Alpha"),
        chunk(paragraph(30, 2, tag="b"), lines=(5, 6), title="Beta", ctx="After alpha"),
        chunk(paragraph(80, 4, tag="c"), lines=(8, 11), title="Gamma"),
    ]


class TestMerge:
    def test_merges_adjacent_chunks_in_either_order(self, sequence):
        alpha, beta, gamma = sequence

        result = merge_chunks(sequence, beta.id, alpha.id)

        assert len(result) == 2
        merged = result[0]
        assert merged.id not in {alpha.id, beta.id}
        assert merged.title == "Alpha"
        assert merged.lines == (1, 6)
        assert merged.start == alpha.start
        assert merged.end == beta.end
        assert merged.ctx == alpha.ctx
        assert merged.text == alpha.text + "\n\n" + beta.text
        assert merged.word_count == 90
        assert result[1] is gamma

    def test_input_sequence_is_left_alone(self, sequence):
        before = list(sequence)

        merge_chunks(sequence, sequence[1].id, sequence[2].id)

        assert sequence == before

    def test_rejects_non_adjacent_chunks(self, sequence):
        before = list(sequence)

        with pytest.raises(NotAdjacentError):
            merge_chunks(sequence, sequence[0].id, sequence[2].id)

        assert sequence == before

    @pytest.mark.parametrize("count", [0, 1, 3])
    def test_requires_exactly_two_selected(self, sequence, count):
        selected = [c.id for c in sequence[:count]]
        before = list(sequence)

        with pytest.raises(SelectionError) as excinfo:
            merge_selected(sequence, selected)

        assert excinfo.value.error_code == "select_exactly_two"
        assert sequence == before

    def test_duplicate_selection_counts_once(self, sequence):
        with pytest.raises(SelectionError):
            merge_selected(sequence, [sequence[0].id, sequence[0].id])

    def test_unknown_id(self, sequence):
        with pytest.raises(ChunkNotFoundError):
            merge_chunks(sequence, sequence[0].id, "missing")


class TestMidpointSplit:
    def test_splits_words_and_lines_in_half(self, chunk, paragraph):
        original = chunk(paragraph(100, 10), lines=(10, 19), title="Long")

        part1, part2 = split_chunk([original], original.id)

        assert (part1.word_count, part2.word_count) == (50, 50)
        assert part1.lines == (10, 14)
        assert part2.lines == (15, 19)
        assert part1.text == " ".join(f"w{i}" for i in range(1, 51))
        assert (part1.title, part2.title) == ("Long (Part 1)", "Long (Part 2)")
        assert part1.ctx is None
        assert part2.ctx == "Continuation of Long"
        assert part1.start == original.start
        assert part2.end == original.end
        assert part1.end == "w44 w45 w46 w47 w48 w49 w50"
        assert part2.start == "w51 w52 w53 w54 w55 w56 w57"
        assert len({original.id, part1.id, part2.id}) == 3

    def test_keeps_neighbours_in_place(self, sequence, paragraph, chunk):
        big = chunk(paragraph(120, 4, tag="d"), lines=(13, 16), title="Delta")
        chunks = [*sequence, big]

        result = split_chunk(chunks, big.id)

        assert result[:3] == sequence
        assert len(result) == 5
        assert validate_sequence(result) == []

    def test_too_small_to_split(self, sequence, chunk, paragraph):
        small = chunk(paragraph(99, 9), lines=(13, 21))
        chunks = [*sequence, small]
        before = list(chunks)

        with pytest.raises(ChunkTooSmallError) as excinfo:
            split_chunk(chunks, small.id)

        assert excinfo.value.to_dict()["error_code"] == "chunk_too_small"
        assert chunks == before

    def test_single_line_chunk_cannot_be_split(self, sequence, chunk, paragraph):
        one_line = chunk(paragraph(120), lines=(13, 13))
        chunks = [*sequence, one_line]
        before = list(chunks)

        with pytest.raises(SingleLineChunkError) as excinfo:
            split_chunk(chunks, one_line.id)

        assert excinfo.value.error_code == "single_line_chunk"
        assert chunks == before

    def test_two_line_chunk_splits_into_one_line_each(self, sequence, chunk, paragraph):
        pair = chunk(paragraph(120, 2, tag="d"), lines=(13, 14))

        result = split_chunk([*sequence, pair], pair.id)

        assert [c.lines for c in result[3:]] == [(13, 13), (14, 14)]
        assert validate_sequence(result) == []

    def test_split_then_merge_keeps_every_word(self, chunk, paragraph):
        original = chunk(paragraph(140, 7), lines=(3, 9))

        part1, part2 = split_chunk([original], original.id)
        (merged,) = merge_chunks([part1, part2], part1.id, part2.id)

        assert merged.text.split() == original.text.split()
        assert merged.lines == original.lines


class TestSegmentText:
    def test_prefers_paragraphs(self):
        segmentation = segment_text("First part here.\n\nSecond part here.")
        assert segmentation.kind == "paragraph"
        assert segmentation.segments == ["First part here.", "Second part here."]

    def test_falls_back_to_lines(self):
        segmentation = segment_text("line one\nline two\nline three")
        assert segmentation.kind == "line"
        assert len(segmentation.segments) == 3

    def test_falls_back_to_sentences(self):
        segmentation = segment_text("It rained. Then it stopped! Was it over?")
        assert segmentation.kind == "sentence"
        assert segmentation.delimiter == ""
        assert segmentation.segments == ["It rained. ", "Then it stopped! ", "Was it over?"]

    def test_sentence_segments_keep_the_original_whitespace(self):
        text = "  First one.   Second one!  Third?\n"

        segmentation = segment_text(text)

        assert segmentation.kind == "sentence"
        assert len(segmentation.segments) == 3
        assert segmentation.delimiter.join(segmentation.segments) == text

    def test_repeated_blank_lines_are_kept_in_the_join(self):
        text = "one\n\n\n\ntwo"
        segmentation = segment_text(text)
        assert segmentation.delimiter.join(segmentation.segments) == text
        assert len(segmentation.segments) == 2

    def test_no_boundaries(self):
        with pytest.raises(NoBoundariesError):
            segment_text("a single clause without any break")


class TestInteractiveSplit:
    @pytest.fixture
    def sectioned(self, chunk, paragraph):
        text = "\n\n".join([
            paragraph(20, 2, tag="a"),
            paragraph(20, 2, tag="b"),
            paragraph(40, 2, tag="c"),
        ])
        return chunk(text, lines=(1, 8), title="Notes")

    def test_splits_after_the_chosen_paragraph(self, sectioned):
        part1, part2 = interactive_split([sectioned], sectioned.id, 0)

        assert part1.text == sectioned.text.split("\n\n")[0]
        assert (part1.word_count, part2.word_count) == (20, 60)
        assert part1.lines == (1, 3)
        assert part2.lines == (4, 8)
        assert part2.start == "b1 b2 b3 b4 b5 b6 b7"
        assert part2.ctx == "Continuation of Notes"

    def test_merging_back_restores_the_text_exactly(self, sectioned):
        part1, part2 = interactive_split([sectioned], sectioned.id, 1)
        (merged,) = merge_chunks([part1, part2], part1.id, part2.id)

        assert merged.text == sectioned.text
        assert merged.lines == sectioned.lines

    @pytest.mark.parametrize("boundary", [-1, 2, 10])
    def test_rejects_boundaries_that_leave_a_part_empty(self, sectioned, boundary):
        with pytest.raises(InvalidBoundaryError):
            interactive_split([sectioned], sectioned.id, boundary)

    def test_line_ranges_never_invert(self, chunk):
        original = chunk("Short intro.\nA much longer second line with many more words in it.", lines=(2, 3))

        part1, part2 = interactive_split([original], original.id, 0)

        assert part1.lines == (2, 2)
        assert part2.lines == (3, 3)

    def test_sentence_split_loses_no_characters(self, chunk):
        original = chunk("  First one.   Second one!  Third?\n", lines=(4, 5))

        part1, part2 = interactive_split([original], original.id, 0)

        assert part1.text + part2.text == original.text
        assert (part1.word_count, part2.word_count) == (2, 3)
        assert (part1.lines, part2.lines) == ((4, 4), (5, 5))

    def test_single_line_chunk_is_rejected(self, sequence, chunk):
        one_line = chunk("It rained. Then it stopped! Was it over?", lines=(13, 13))
        chunks = [*sequence, one_line]
        before = list(chunks)

        with pytest.raises(SingleLineChunkError):
            interactive_split(chunks, one_line.id, 0)

        assert chunks == before

    @pytest.mark.parametrize("boundary", [0, 1])
    def test_editor_output_passes_validation(self, sequence, chunk, boundary):
        tail = chunk("It rained. Then it stopped! Was it over?", lines=(13, 14))

        result = interactive_split([*sequence, tail], tail.id, boundary)

        assert validate_sequence(result) == []

    def test_works_on_locally_detected_chunks(self, paragraph):
        text = paragraph(60, 3, tag="a") + "\n" + paragraph(60, 3, tag="b")
        chunks = chunk_locally(text).chunks

        result = interactive_split(chunks, chunks[0].id, 2)

        assert [c.lines for c in result] == [(1, 3), (4, 6)]
        assert validate_sequence(result, text) == []


class TestToggleSelection:
    def test_adds_and_removes(self):
        selected = toggle_selection((), "a")
        selected = toggle_selection(selected, "b")
        assert selected == ("a", "b")
        assert toggle_selection(selected, "a") == ("b",)
