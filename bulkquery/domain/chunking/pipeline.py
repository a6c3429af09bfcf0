"""Chunk detection pipeline: oracle-backed manifest with a deterministic local fallback."""

import logging
from typing import Optional

from bulkquery.config import DEFAULT_POLICY, ChunkingPolicy
from bulkquery.domain.chunking.core import chunk_paragraphs, chunks_from_manifest
from bulkquery.domain.chunking.errors import ChunkingError, ManifestError
from bulkquery.domain.chunking.oracle import ChunkOracle, parse_manifest
from bulkquery.domain.chunking.validation import coverage_issues, ordering_issues, validate_sequence
from bulkquery.schemas import ChunkingResult
from bulkquery.textutils import number_lines

logger = logging.getLogger(__name__)


def chunk_locally(text: str, policy: ChunkingPolicy = DEFAULT_POLICY) -> ChunkingResult:
    """Run the paragraph-based chunker and attach any invariant issues."""
    chunks, skipped = chunk_paragraphs(text, policy)
    return ChunkingResult(
        chunks=chunks,
        strategy="local",
        skipped_lines=skipped,
        issues=validate_sequence(chunks, text, skipped),
    )


def chunk_with_oracle(
    text: str,
    oracle: ChunkOracle,
    task_hint: Optional[str] = None,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> ChunkingResult:
    """
    Ask the oracle for a manifest and rebuild chunk bodies from the source.

    The manifest is accepted whole or not at all: a response that does not
    parse, lists no chunks, proposes ranges out of order or overlapping, or
    leaves a line holding text outside every chunk raises and nothing from it
    is kept.

    Raises:
        OracleError: the oracle call itself failed.
        ManifestError: the response is not a usable manifest.
    """
    raw = oracle(number_lines(text), task_hint)
    manifest = parse_manifest(raw)
    chunks, issues = chunks_from_manifest(text, manifest, policy)

    structural = ordering_issues(chunks)
    if structural:
        raise ManifestError(f"manifest ranges are out of order or overlap: {structural[0]}")
    uncovered = coverage_issues(chunks, text)
    if uncovered:
        raise ManifestError(f"manifest does not cover the whole document: {'; '.join(uncovered)}")

    issues.extend(validate_sequence(chunks, text))
    if issues:
        logger.warning("Chunk builder: oracle manifest accepted with %d issue(s)", len(issues))
    return ChunkingResult(chunks=chunks, strategy="oracle", issues=issues)


def detect_chunks(
    text: str,
    oracle: Optional[ChunkOracle] = None,
    task_hint: Optional[str] = None,
    policy: ChunkingPolicy = DEFAULT_POLICY,
) -> ChunkingResult:
    """
    Build the initial chunk sequence for `text`.

    Uses the oracle when one is given; any oracle failure discards its output
    and falls back to local chunking, recording the reason on the result.
    """
    if not text or not text.strip():
        return ChunkingResult(chunks=[], strategy="local")

    if oracle is None:
        result = chunk_locally(text, policy)
        logger.info("Chunk builder: local chunking produced %d chunk(s)", len(result.chunks))
        return result

    try:
        result = chunk_with_oracle(text, oracle, task_hint, policy)
    except ChunkingError as exc:
        reason = exc.detail
    except Exception as exc:
        logger.exception("Chunk builder: oracle raised unexpectedly")
        reason = f"oracle raised {type(exc).__name__}: {exc}"
    else:
        logger.info("Chunk builder: oracle produced %d chunk(s)", len(result.chunks))
        return result

    logger.warning("Chunk builder: oracle chunking failed (%s); falling back to local chunking", reason)
    fallback = chunk_locally(text, policy)
    return fallback.model_copy(update={"fallback_reason": reason})
