"""
Domain layer containing the chunking and processing logic.

This package is intentionally free of web framework dependencies so it can be
reused by other interfaces or projects.
"""

from . import chunking, processing

__all__ = [
    "chunking",
    "processing",
]
