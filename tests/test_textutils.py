from bulkquery.textutils import count_words, leading_words, number_lines, slice_lines, split_lines, trailing_words


class TestCountWords:
    def test_counts_words_in_a_sentence(self):
        assert count_words("hello world foo bar") == 4

    def test_empty_and_whitespace_only(self):
        assert count_words("") == 0
        assert count_words("   \n\t  ") == 0

    def test_collapses_runs_of_whitespace(self):
        assert count_words("one   two   three") == 3
        assert count_words("one\ntwo\nthree") == 3


class TestAnchors:
    def test_leading_words_are_verbatim_across_newlines(self):
        text = "  Alpha beta,\ngamma  delta epsilon"
        anchor = leading_words(text, 3)
        assert anchor == "Alpha beta,\ngamma"
        assert anchor in text

    def test_trailing_words_are_verbatim(self):
        text = "one two three.\n\nfour  five!"
        anchor = trailing_words(text, 3)
        assert anchor == "three.\n\nfour  five!"
        assert anchor in text

    def test_short_text_returns_all_words(self):
        assert leading_words("just two", 7) == "just two"
        assert trailing_words("just two", 7) == "just two"

    def test_blank_text_has_no_anchor(self):
        assert leading_words("   ", 7) == ""
        assert trailing_words("", 7) == ""


def test_number_lines_prefixes_every_line():
    assert number_lines("a\n\nb") == "[L1] a\n[L2] \n[L3] b"


def test_slice_lines_clamps_to_source():
    lines = split_lines("l1\nl2\nl3")
    assert slice_lines(lines, 0, 99) == (0, 3, "l1\nl2\nl3")
    assert slice_lines(lines, 2, 2) == (1, 2, "l2")
    assert slice_lines(lines, 5, 9) == (4, 4, "")
