"""
Invariant-preserving edits over a chunk sequence: merge, midpoint split and
segment-boundary split.

Every operation takes the current sequence and returns a new list. Chunks are
never modified; the affected entries are replaced by freshly built chunks with
new ids. On a precondition failure a `ChunkEditError` is raised and the
caller's list is untouched.
"""

import logging
import re
from typing import Iterable, List, Sequence, Tuple

from bulkquery.config import DEFAULT_POLICY, ChunkingPolicy
from bulkquery.domain.chunking.core import PARAGRAPH_SEPARATOR, make_chunk, new_chunk_id
from bulkquery.domain.chunking.errors import (
    ChunkNotFoundError,
    ChunkTooSmallError,
    InvalidBoundaryError,
    NoBoundariesError,
    NotAdjacentError,
    SelectionError,
    SingleLineChunkError,
)
from bulkquery.schemas import Chunk, Segmentation
from bulkquery.textutils import count_words, leading_words, trailing_words

logger = logging.getLogger(__name__)

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def _index_of(chunks: Sequence[Chunk], chunk_id: str) -> int:
    for index, chunk in enumerate(chunks):
        if chunk.id == chunk_id:
            return index
    raise ChunkNotFoundError(f"no chunk with id {chunk_id!r}")


def _require_two_lines(chunk: Chunk) -> None:
    first, last = chunk.lines
    if first == last:
        raise SingleLineChunkError(f"chunk spans only line {first}; both parts would share it")


def toggle_selection(selected: Iterable[str], chunk_id: str) -> Tuple[str, ...]:
    """Add `chunk_id` to the selection, or remove it if already present."""
    current = tuple(selected)
    if chunk_id in current:
        return tuple(i for i in current if i != chunk_id)
    return current + (chunk_id,)


# ---------------- Merge ----------------

def merge_selected(chunks: Sequence[Chunk], selected: Iterable[str]) -> List[Chunk]:
    """
    Merge the two selected chunks into one.

    Raises:
        SelectionError: the selection does not name exactly two chunks.
        ChunkNotFoundError: a selected id is not in the sequence.
        NotAdjacentError: the two chunks are not neighbours.
    """
    ids = list(dict.fromkeys(selected))
    if len(ids) != 2:
        raise SelectionError(f"select exactly two chunks to merge (got {len(ids)})")

    first_index, second_index = sorted(_index_of(chunks, chunk_id) for chunk_id in ids)
    if second_index - first_index != 1:
        raise NotAdjacentError("chunks must be adjacent to merge")

    first, second = chunks[first_index], chunks[second_index]
    merged = Chunk(
        id=new_chunk_id(),
        title=first.title,
        start=first.start,
        end=second.end,
        lines=(first.lines[0], second.lines[1]),
        ctx=first.ctx,
        text=first.text + PARAGRAPH_SEPARATOR + second.text,
    )
    assert merged.word_count == first.word_count + second.word_count

    logger.debug("Chunk editor: merged chunks %d and %d", first_index + 1, second_index + 1)
    return [*chunks[:first_index], merged, *chunks[second_index + 1:]]


def merge_chunks(chunks: Sequence[Chunk], id_a: str, id_b: str) -> List[Chunk]:
    """Merge two adjacent chunks, given in either order."""
    return merge_selected(chunks, (id_a, id_b))


# ---------------- Split ----------------

def _split_into(
    chunks: Sequence[Chunk],
    index: int,
    text1: str,
    text2: str,
    lines1: Tuple[int, int],
    lines2: Tuple[int, int],
    policy: ChunkingPolicy,
) -> List[Chunk]:
    original = chunks[index]
    # Inherited anchors stay only while they are still verbatim in their part.
    start = original.start if original.start and original.start in text1 else None
    end = original.end if original.end and original.end in text2 else None

    part1 = make_chunk(
        text1,
        lines1,
        title=f"{original.title} (Part 1)",
        ctx=original.ctx,
        start=start,
        end=trailing_words(text1, policy.anchor_words),
        policy=policy,
    )
    part2 = make_chunk(
        text2,
        lines2,
        title=f"{original.title} (Part 2)",
        ctx=f"Continuation of {original.title}",
        start=leading_words(text2, policy.anchor_words),
        end=end,
        policy=policy,
    )
    return [*chunks[:index], part1, part2, *chunks[index + 1:]]


def split_chunk(
    chunks: Sequence[Chunk],
    chunk_id: str,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> List[Chunk]:
    """
    Split a chunk in two at its word midpoint.

    Both halves are rejoined with single spaces, so line breaks inside the
    chunk are lost. `interactive_split` keeps them.

    Raises:
        ChunkNotFoundError: `chunk_id` is not in the sequence.
        ChunkTooSmallError: the chunk has fewer than `policy.min_split_words` words.
        SingleLineChunkError: the chunk spans a single line.
    """
    index = _index_of(chunks, chunk_id)
    original = chunks[index]
    if original.word_count < policy.min_split_words:
        raise ChunkTooSmallError(
            f"chunk too small to split ({original.word_count} words, need {policy.min_split_words})"
        )
    _require_two_lines(original)

    words = original.text.split()
    mid = len(words) // 2
    text1 = " ".join(words[:mid])
    text2 = " ".join(words[mid:])

    first, last = original.lines
    lines1 = (first, first + (last - first) // 2)
    lines2 = (lines1[1] + 1, last)

    logger.debug("Chunk editor: midpoint split of chunk %d at word %d", index + 1, mid)
    return _split_into(chunks, index, text1, text2, lines1, lines2, policy)


# ---------------- Interactive split ----------------

def _fold_blank(raw: Iterable[str], delimiter: str) -> List[str]:
    """
    Fold blank pieces into their neighbour so that `delimiter.join(result)`
    equals `delimiter.join(raw)` and every piece holds words.
    """
    pieces: List[str] = []
    pending = ""
    for piece in raw:
        if not piece.strip():
            if pieces:
                pieces[-1] += delimiter + piece
            else:
                pending += piece + delimiter
            continue
        pieces.append(pending + piece)
        pending = ""
    return pieces


def _pieces(text: str, delimiter: str) -> List[str]:
    return _fold_blank(text.split(delimiter), delimiter)


def _sentence_pieces(text: str) -> List[str]:
    """Cut after each sentence break, keeping the whitespace run with the sentence before it."""
    raw: List[str] = []
    cut = 0
    for match in _SENTENCE_BREAK.finditer(text):
        raw.append(text[cut:match.end()])
        cut = match.end()
    raw.append(text[cut:])
    return _fold_blank(raw, "")


def segment_text(text: str) -> Segmentation:
    """
    Offer candidate split points: paragraphs if there are two or more, else
    lines, else sentences. Joining the segments with the returned delimiter
    gives back `text` exactly.

    Raises:
        NoBoundariesError: the text has fewer than two segments of every kind.
    """
    paragraphs = _pieces(text, PARAGRAPH_SEPARATOR)
    if len(paragraphs) >= 2:
        return Segmentation(kind="paragraph", delimiter=PARAGRAPH_SEPARATOR, segments=paragraphs)

    lines = _pieces(text, "\n")
    if len(lines) >= 2:
        return Segmentation(kind="line", delimiter="\n", segments=lines)

    sentences = _sentence_pieces(text)
    if len(sentences) >= 2:
        return Segmentation(kind="sentence", delimiter="", segments=sentences)

    raise NoBoundariesError("no clear paragraph or sentence boundaries to split on")


def interactive_split(
    chunks: Sequence[Chunk],
    chunk_id: str,
    boundary_index: int,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> List[Chunk]:
    """
    Split a chunk after segment `boundary_index` of its `segment_text` result.

    Line ranges are divided in proportion to each part's share of the words.
    The two parts together hold the original text unchanged.

    Raises:
        ChunkNotFoundError: `chunk_id` is not in the sequence.
        SingleLineChunkError: the chunk spans a single line.
        NoBoundariesError: the chunk has nothing to split on.
        InvalidBoundaryError: `boundary_index` would leave a part empty.
    """
    index = _index_of(chunks, chunk_id)
    original = chunks[index]
    _require_two_lines(original)
    segmentation = segment_text(original.text)
    segments = segmentation.segments

    if not 0 <= boundary_index < len(segments) - 1:
        raise InvalidBoundaryError(
            f"boundary index {boundary_index} is outside 0..{len(segments) - 2}"
        )

    text1 = segmentation.delimiter.join(segments[: boundary_index + 1])
    text2 = segmentation.delimiter.join(segments[boundary_index + 1:])
    words1, words2 = count_words(text1), count_words(text2)

    first, last = original.lines
    span = last - first
    offset = min(round(span * words1 / (words1 + words2)), span - 1)
    lines1 = (first, first + offset)
    lines2 = (first + offset + 1, last)

    logger.debug(
        "Chunk editor: %s split of chunk %d after segment %d (%d/%d words)",
        segmentation.kind,
        index + 1,
        boundary_index,
        words1,
        words2,
    )
    return _split_into(chunks, index, text1, text2, lines1, lines2, policy)
