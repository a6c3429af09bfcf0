"""Core chunk construction primitives: paragraph parsing, chunk records, manifest reconstruction."""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bulkquery.config import DEFAULT_POLICY, ChunkingPolicy
from bulkquery.domain.chunking.errors import ManifestError
from bulkquery.schemas import Chunk, ChunkManifest
from bulkquery.textutils import count_words, leading_words, slice_lines, split_lines, trailing_words

logger = logging.getLogger(__name__)

PARAGRAPH_SEPARATOR = "\n\n"
CONTINUATION_CTX = "Continuation of previous discussion"


@dataclass
class Paragraph:
    """
    A blank-line separated piece of the source produced by `parse_paragraphs`.

    Attributes:
        text: Raw paragraph text, inner newlines preserved.
        start_line: 1-based line where the paragraph starts.
        end_line: 1-based line where the paragraph ends.
        word_count: Whitespace-delimited tokens in `text`.
    """

    text: str
    start_line: int
    end_line: int
    word_count: int

    @property
    def lines(self) -> Tuple[int, int]:
        return self.start_line, self.end_line


def parse_paragraphs(text: str) -> List[Paragraph]:
    """
    Split text on blank-line separators and track the line range of each piece.

    Every piece advances the line cursor, empty ones included, so the ranges
    stay aligned with the source even when blank lines repeat. The single
    separator line between two pieces belongs to neither.
    """
    paragraphs: List[Paragraph] = []
    cursor = 0
    for piece in text.split(PARAGRAPH_SEPARATOR):
        span = piece.count("\n") + 1
        paragraphs.append(
            Paragraph(
                text=piece,
                start_line=cursor + 1,
                end_line=cursor + span,
                word_count=count_words(piece),
            )
        )
        cursor += span + 1
    return paragraphs


def new_chunk_id() -> str:
    """Fresh opaque chunk identifier; ids are never derived from content so they are never reused."""
    return uuid.uuid4().hex


def make_chunk(
    text: str,
    lines: Tuple[int, int],
    title: str,
    ctx: Optional[str],
    start: Optional[str] = None,
    end: Optional[str] = None,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> Chunk:
    """Build a new chunk, deriving verbatim anchors from `text` where none are given."""
    return Chunk(
        id=new_chunk_id(),
        title=title,
        start=start if start is not None else leading_words(text, policy.anchor_words),
        end=end if end is not None else trailing_words(text, policy.anchor_words),
        lines=lines,
        ctx=ctx,
        text=text,
    )


def chunk_paragraphs(
    text: str,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> Tuple[List[Chunk], List[Tuple[int, int]]]:
    """
    Deterministic local chunking: one chunk per substantial paragraph.

    Paragraphs with `policy.min_paragraph_words` words or fewer (headers,
    captions, blank runs) produce no chunk. Their line ranges are returned as
    skipped so coverage can still be accounted for.

    Returns:
        The ordered chunks and the skipped line ranges.
    """
    chunks: List[Chunk] = []
    skipped: List[Tuple[int, int]] = []

    for paragraph in parse_paragraphs(text):
        if paragraph.word_count <= policy.min_paragraph_words:
            skipped.append(paragraph.lines)
            continue
        chunks.append(
            make_chunk(
                paragraph.text,
                paragraph.lines,
                title=f"Section {len(chunks) + 1}",
                ctx=CONTINUATION_CTX if chunks else None,
                policy=policy,
            )
        )

    logger.debug(
        "Local chunker: %d chunk(s), %d skipped paragraph(s)",
        len(chunks),
        len(skipped),
    )
    return chunks, skipped


def _anchor_or_default(anchor: str, body: str, source: str, default: str) -> Tuple[str, bool]:
    if anchor.strip() and (anchor in body or anchor in source):
        return anchor, False
    return default, True


def chunks_from_manifest(
    text: str,
    manifest: ChunkManifest,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> Tuple[List[Chunk], List[str]]:
    """
    Rebuild chunk bodies from the source using the manifest's line ranges.

    Ranges are clamped to the source. Anchors the oracle did not copy verbatim
    are replaced with anchors taken from the chunk body and reported as issues.

    Raises:
        ManifestError: if the manifest is empty or an entry covers no text.
    """
    if not manifest.chunks:
        raise ManifestError("manifest lists no chunks")

    lines = split_lines(text)
    chunks: List[Chunk] = []
    issues: List[str] = []

    for position, entry in enumerate(manifest.chunks, start=1):
        first, last = entry.lines
        lo, hi, body = slice_lines(lines, first, last)
        if hi <= lo or not body.strip():
            raise ManifestError(
                f"manifest entry {position} covers no text (lines {first}-{last} of {len(lines)})"
            )

        start, start_replaced = _anchor_or_default(
            entry.start, body, text, leading_words(body, policy.anchor_words)
        )
        end, end_replaced = _anchor_or_default(
            entry.end, body, text, trailing_words(body, policy.anchor_words)
        )
        if start_replaced or end_replaced:
            issues.append(f"entry {position}: anchor not found verbatim in the source; rebuilt from text")

        chunks.append(
            make_chunk(
                body,
                (lo + 1, hi),
                title=entry.title or f"Section {position}",
                ctx=entry.ctx,
                start=start,
                end=end,
                policy=policy,
            )
        )

    return chunks, issues
