"""Structural checks over a chunk sequence. Checks report issues; they never raise."""

from typing import Iterable, List, Optional, Sequence, Tuple

from bulkquery.schemas import Chunk
from bulkquery.textutils import split_lines


def ordering_issues(chunks: Sequence[Chunk]) -> List[str]:
    """Report chunks that are out of document order or overlap their predecessor."""
    issues: List[str] = []
    for index in range(1, len(chunks)):
        prev_last = chunks[index - 1].lines[1]
        first = chunks[index].lines[0]
        if first <= prev_last:
            issues.append(
                f"chunk {index + 1} starts at line {first} but chunk {index} ends at line {prev_last}"
            )
    return issues


def coverage_issues(
    chunks: Sequence[Chunk],
    source_text: str,
    skipped: Iterable[Tuple[int, int]] = (),
) -> List[str]:
    """
    Report source lines that hold words but fall outside every chunk and every
    skipped range. Uncovered blank lines are paragraph separators and are fine.
    """
    lines = split_lines(source_text)
    covered = [False] * (len(lines) + 1)
    for first, last in [c.lines for c in chunks] + list(skipped):
        for n in range(max(1, first), min(len(lines), last) + 1):
            covered[n] = True

    issues: List[str] = []
    gap_start: Optional[int] = None
    for n in range(1, len(lines) + 2):
        uncovered = n <= len(lines) and not covered[n] and bool(lines[n - 1].strip())
        if uncovered and gap_start is None:
            gap_start = n
        elif not uncovered and gap_start is not None:
            issues.append(f"lines {gap_start}-{n - 1} are not covered by any chunk")
            gap_start = None

    for index, chunk in enumerate(chunks, start=1):
        if chunk.lines[1] > len(lines):
            issues.append(f"chunk {index} ends at line {chunk.lines[1]} past the end of the source ({len(lines)})")
    return issues


def anchor_issues(chunks: Sequence[Chunk], source_text: Optional[str] = None) -> List[str]:
    issues: List[str] = []
    for index, chunk in enumerate(chunks, start=1):
        for name in ("start", "end"):
            anchor = getattr(chunk, name)
            if not anchor.strip():
                issues.append(f"chunk {index} has an empty {name} anchor")
            elif anchor not in chunk.text and (source_text is None or anchor not in source_text):
                issues.append(f"chunk {index} {name} anchor is not a verbatim substring of its text")
    return issues


def validate_sequence(
    chunks: Sequence[Chunk],
    source_text: Optional[str] = None,
    skipped: Iterable[Tuple[int, int]] = (),
) -> List[str]:
    """
    Check a chunk sequence against the partition invariants.

    Ordering, overlap and anchors are always checked. Coverage of the source
    is checked only when `source_text` is given. Word counts cannot drift
    since they are derived from `text`.
    """
    issues = ordering_issues(chunks)
    issues.extend(anchor_issues(chunks, source_text))
    if source_text is not None:
        issues.extend(coverage_issues(chunks, source_text, skipped))
    ids = [c.id for c in chunks]
    if len(set(ids)) != len(ids):
        issues.append("chunk ids are not unique")
    return issues
