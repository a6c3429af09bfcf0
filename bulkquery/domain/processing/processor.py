"""Run a task instruction over chunks, through OpenAI when available or a local fallback."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional, Sequence

from bulkquery import config
from bulkquery.domain.openai_client import complete, get_openai_client
from bulkquery.schemas import Chunk, ProcessingMode, ProcessingResult

logger = logging.getLogger(__name__)

_SENTENCE_END = re.compile(r"[.!?]+")


def build_process_prompt(chunk: Chunk, task_prompt: str) -> str:
    context = f"[Context: {chunk.ctx}]\n\n" if chunk.ctx else ""
    return f"{task_prompt}\n\n---\n\n{context}{chunk.text}"


def _sentences(text: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]


def fallback_process(text: str, task_prompt: str) -> str:
    """Deterministic stand-in used when no model is configured."""
    task = task_prompt.lower()
    if "flashcard" in task:
        return "\n".join(
            f"What is discussed in sentence {i}?;{sentence}"
            for i, sentence in enumerate(_sentences(text)[:3], start=1)
        )
    if "summarize" in task:
        words = text.split()
        return f"Summary: {' '.join(words[:50])}..."
    if "bullet" in task:
        return "\n".join(f"- {sentence}" for sentence in _sentences(text))
    return f"[Processed with: {task_prompt}]\n\n{text}"


def process_chunk(
    chunk: Chunk,
    task_prompt: str,
    client: Optional[Any] = None,
    model: str = config.PROCESS_MODEL,
) -> str:
    """
    Apply `task_prompt` to one chunk and return the model output.

    Without a client the local fallback is used. Model errors propagate to
    the caller; no retry happens here.
    """
    if client is None:
        return fallback_process(chunk.text, task_prompt)
    return complete(client, model, [{"role": "user", "content": build_process_prompt(chunk, task_prompt)}])


def _run_one(chunk: Chunk, task_prompt: str, client: Optional[Any]) -> ProcessingResult:
    try:
        output = process_chunk(chunk, task_prompt, client)
    except Exception as exc:
        logger.exception("Chunk processor: chunk %s failed", chunk.id)
        return ProcessingResult(chunk_id=chunk.id, status="error", error=str(exc))
    return ProcessingResult(chunk_id=chunk.id, status="complete", output=output)


def process_chunks(
    chunks: Sequence[Chunk],
    task_prompt: str,
    mode: ProcessingMode = "sequential",
    client: Optional[Any] = None,
    max_workers: int = config.PROCESS_MAX_WORKERS,
) -> List[ProcessingResult]:
    """
    Process every chunk and return one result per chunk, in sequence order.

    A failing chunk is recorded with status "error" and does not stop the
    run. Parallel mode only reads the chunks, so no locking is needed.
    """
    logger.info(
        "Chunk processor: processing %d chunk(s) (mode=%s, model=%s)",
        len(chunks),
        mode,
        "local" if client is None else config.PROCESS_MODEL,
    )
    if mode == "parallel" and len(chunks) > 1:
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            results = list(pool.map(lambda c: _run_one(c, task_prompt, client), chunks))
    else:
        results = [_run_one(c, task_prompt, client) for c in chunks]

    logger.info(
        "Chunk processor: done (complete=%d, errors=%d)",
        sum(r.status == "complete" for r in results),
        sum(r.status == "error" for r in results),
    )
    return results


def default_client() -> Optional[Any]:
    return get_openai_client()
