"""
Processing of finished chunk sequences: applying the task instruction and exporting results.
"""

from .export import export_results
from .processor import build_process_prompt, default_client, fallback_process, process_chunk, process_chunks

__all__ = [
    "build_process_prompt",
    "default_client",
    "export_results",
    "fallback_process",
    "process_chunk",
    "process_chunks",
]
