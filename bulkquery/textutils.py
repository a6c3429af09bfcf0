"""Word and line helpers shared by the chunk model and the chunking domain."""

import re
from collections import deque
from itertools import islice
from typing import List, Tuple

_WORD = re.compile(r"\S+")


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split())


def leading_words(text: str, limit: int) -> str:
    """
    Return the first `limit` words of `text` exactly as they appear, including
    the whitespace between them, so the result is always a substring of `text`.
    """
    spans = [m.span() for m in islice(_WORD.finditer(text), limit)]
    if not spans:
        return ""
    return text[spans[0][0]:spans[-1][1]]


def trailing_words(text: str, limit: int) -> str:
    """Verbatim counterpart of `leading_words` for the end of `text`."""
    spans = deque((m.span() for m in _WORD.finditer(text)), maxlen=limit)
    if not spans:
        return ""
    return text[spans[0][0]:spans[-1][1]]


def split_lines(text: str) -> List[str]:
    """Split on newlines; line N of the source is index N - 1."""
    return text.split("\n")


def number_lines(text: str) -> str:
    """Prefix every line with its 1-based number as `[L<n>] `."""
    return "\n".join(f"[L{i}] {line}" for i, line in enumerate(split_lines(text), start=1))


def slice_lines(lines: List[str], first: int, last: int) -> Tuple[int, int, str]:
    """
    Return the 0-based half-open bounds and the text of lines `first..last`
    (1-based, inclusive), clamped to the available lines.
    """
    start = max(0, first - 1)
    end = min(len(lines), last)
    if end <= start:
        return start, start, ""
    return start, end, "\n".join(lines[start:end])
