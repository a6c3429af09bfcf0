import json
from typing import Dict, List, Sequence

from bulkquery.schemas import Chunk, ExportFormat, ProcessingResult

RESULT_SEPARATOR = "\n\n---\n\n"


def _completed(chunks: Sequence[Chunk], results: Sequence[ProcessingResult]) -> List[tuple]:
    """Pair completed results with their chunk, in chunk order."""
    by_id: Dict[str, ProcessingResult] = {r.chunk_id: r for r in results}
    pairs = []
    for chunk in chunks:
        result = by_id.get(chunk.id)
        if result and result.status == "complete" and result.output is not None:
            pairs.append((chunk, result))
    return pairs


def export_results(
    chunks: Sequence[Chunk],
    results: Sequence[ProcessingResult],
    fmt: ExportFormat = "text",
) -> str:
    """
    Render completed results for copying or download.

    Results for chunks missing from `chunks`, and results that did not
    complete, are left out.
    """
    pairs = _completed(chunks, results)
    if fmt == "text":
        return RESULT_SEPARATOR.join(result.output for _, result in pairs)
    if fmt == "markdown":
        return "\n\n".join(f"## {chunk.title}\n\n{result.output}" for chunk, result in pairs)
    if fmt == "json":
        return json.dumps(
            [
                {
                    "chunk_id": chunk.id,
                    "title": chunk.title,
                    "lines": list(chunk.lines),
                    "output": result.output,
                }
                for chunk, result in pairs
            ],
            ensure_ascii=False,
            indent=2,
        )
    raise ValueError(f"unsupported export format: {fmt!r}")
