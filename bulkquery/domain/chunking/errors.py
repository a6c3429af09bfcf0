"""
Exceptions raised by the chunk builder, the oracle adapters and the editor.

Editor errors are precondition failures: the caller's sequence is left as it
was and the error carries a stable `error_code` the HTTP layer passes through.
"""

from typing import Any, Dict, Optional


class ChunkingError(Exception):
    """Base exception for all chunking-related errors."""

    error_code = "chunking_error"

    def __init__(self, detail: str, error_code: Optional[str] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if error_code:
            self.error_code = error_code

    def __str__(self) -> str:
        return self.detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error_code": self.error_code, "detail": self.detail}


# ---------------- Builder / oracle ----------------

class OracleError(ChunkingError):
    """The oracle could not be reached or refused the request."""

    error_code = "oracle_error"


class ManifestError(ChunkingError):
    """The oracle answered, but not with a complete, well-formed manifest."""

    error_code = "malformed_manifest"


# ---------------- Editor ----------------

class ChunkEditError(ChunkingError):
    error_code = "edit_rejected"


class ChunkNotFoundError(ChunkEditError):
    error_code = "chunk_not_found"


class SelectionError(ChunkEditError):
    error_code = "select_exactly_two"


class NotAdjacentError(ChunkEditError):
    error_code = "not_adjacent"


class ChunkTooSmallError(ChunkEditError):
    error_code = "chunk_too_small"


class SingleLineChunkError(ChunkEditError):
    """Both parts of a split would share the chunk's only line."""

    error_code = "single_line_chunk"


class NoBoundariesError(ChunkEditError):
    error_code = "no_boundaries"


class InvalidBoundaryError(ChunkEditError):
    error_code = "invalid_boundary"
