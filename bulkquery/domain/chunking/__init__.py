"""
Chunk boundary construction and chunk editing, independent of any web interface.
"""

from .core import chunk_paragraphs, chunks_from_manifest, make_chunk, new_chunk_id, parse_paragraphs
from .editor import interactive_split, merge_chunks, merge_selected, segment_text, split_chunk, toggle_selection
from .errors import (
    ChunkEditError,
    ChunkingError,
    ChunkNotFoundError,
    ChunkTooSmallError,
    InvalidBoundaryError,
    ManifestError,
    NoBoundariesError,
    NotAdjacentError,
    OracleError,
    SelectionError,
    SingleLineChunkError,
)
from .oracle import ChunkOracle, HttpChunkOracle, OpenAIChunkOracle, default_oracle, parse_manifest
from .pipeline import chunk_locally, chunk_with_oracle, detect_chunks
from .stats import compute_chunk_stats, size_indicator, size_indicators, word_count_status
from .validation import validate_sequence

__all__ = [
    "ChunkEditError",
    "ChunkNotFoundError",
    "ChunkOracle",
    "ChunkTooSmallError",
    "ChunkingError",
    "HttpChunkOracle",
    "InvalidBoundaryError",
    "ManifestError",
    "NoBoundariesError",
    "NotAdjacentError",
    "OpenAIChunkOracle",
    "OracleError",
    "SelectionError",
    "SingleLineChunkError",
    "chunk_locally",
    "chunk_paragraphs",
    "chunk_with_oracle",
    "chunks_from_manifest",
    "compute_chunk_stats",
    "default_oracle",
    "detect_chunks",
    "interactive_split",
    "make_chunk",
    "merge_chunks",
    "merge_selected",
    "new_chunk_id",
    "parse_manifest",
    "parse_paragraphs",
    "segment_text",
    "size_indicator",
    "size_indicators",
    "split_chunk",
    "toggle_selection",
    "validate_sequence",
    "word_count_status",
]
