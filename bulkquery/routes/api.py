"""Public JSON API routes for Bulk Query.

These handlers translate HTTP requests into domain-layer calls and return
validated responses for the UI and API consumers. Edit endpoints are
stateless: the client sends the current chunk sequence and receives the new
one. Keep the logic thin and delegate to domain modules.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query

from bulkquery.domain.chunking import (
    ChunkEditError,
    ChunkNotFoundError,
    compute_chunk_stats,
    default_oracle,
    detect_chunks,
    interactive_split,
    merge_selected,
    segment_text,
    size_indicators,
    split_chunk,
    validate_sequence,
)
from bulkquery.domain.processing import default_client, export_results, process_chunk, process_chunks
from bulkquery.project_store import create_project, delete_project, get_project, list_projects, update_project
from bulkquery.schemas import (
    BatchProcessRequest,
    BatchProcessResponse,
    ChunkDetectionRequest,
    ChunkingResult,
    ChunkInteractiveSplitRequest,
    ChunkMergeRequest,
    ChunkSequence,
    ChunkSplitRequest,
    ChunkStatsRequest,
    ChunkStatsResponse,
    ChunkValidationRequest,
    ChunkValidationResponse,
    ExportRequest,
    ExportResponse,
    ProcessRequest,
    ProcessResponse,
    Project,
    ProjectCreate,
    ProjectSummary,
    ProjectUpdate,
    Segmentation,
)

router = APIRouter(prefix="/api", tags=["api"])


# ---------------- Helpers ----------------

def _edit_error(exc: ChunkEditError) -> HTTPException:
    """Map an editor precondition failure to a 4xx response carrying its error code."""
    status_code = 404 if isinstance(exc, ChunkNotFoundError) else 400
    return HTTPException(status_code=status_code, detail=exc.to_dict())


# ---------------- Chunking ----------------

@router.post("/chunking/detect", response_model=ChunkingResult)
def chunking_detect(payload: ChunkDetectionRequest):
    """Build the initial chunk sequence, using the configured oracle when allowed."""
    oracle = default_oracle() if payload.use_oracle else None
    return detect_chunks(payload.text, oracle=oracle, task_hint=payload.task_prompt)


@router.post("/chunking/merge", response_model=ChunkSequence)
def chunking_merge(payload: ChunkMergeRequest):
    """Merge the two selected, adjacent chunks."""
    try:
        chunks = merge_selected(payload.chunks, payload.chunk_ids)
    except ChunkEditError as exc:
        raise _edit_error(exc)
    return {"chunks": chunks}


@router.post("/chunking/split", response_model=ChunkSequence)
def chunking_split(payload: ChunkSplitRequest):
    """Split a chunk at its word midpoint."""
    try:
        chunks = split_chunk(payload.chunks, payload.chunk_id)
    except ChunkEditError as exc:
        raise _edit_error(exc)
    return {"chunks": chunks}


@router.post("/chunking/segments", response_model=Segmentation)
def chunking_segments(payload: ChunkSplitRequest):
    """List the candidate split points of one chunk for an interactive split."""
    chunk = next((c for c in payload.chunks if c.id == payload.chunk_id), None)
    if chunk is None:
        raise _edit_error(ChunkNotFoundError(f"no chunk with id {payload.chunk_id!r}"))
    try:
        return segment_text(chunk.text)
    except ChunkEditError as exc:
        raise _edit_error(exc)


@router.post("/chunking/split/interactive", response_model=ChunkSequence)
def chunking_split_interactive(payload: ChunkInteractiveSplitRequest):
    """Split a chunk after the chosen segment."""
    try:
        chunks = interactive_split(payload.chunks, payload.chunk_id, payload.boundary_index)
    except ChunkEditError as exc:
        raise _edit_error(exc)
    return {"chunks": chunks}


@router.post("/chunking/validate", response_model=ChunkValidationResponse)
def chunking_validate(payload: ChunkValidationRequest):
    """Check a chunk sequence against the partition invariants."""
    issues = validate_sequence(payload.chunks, payload.text, payload.skipped_lines)
    return {"ok": not issues, "issues": issues}


@router.post("/chunking/stats", response_model=ChunkStatsResponse)
def chunking_stats(payload: ChunkStatsRequest):
    """Summarize chunk sizes and estimate processing cost."""
    return {
        "stats": compute_chunk_stats(payload.chunks, payload.task_prompt),
        "indicators": size_indicators(payload.chunks),
    }


# ---------------- Processing ----------------

@router.post("/process", response_model=ProcessResponse)
def process_one(payload: ProcessRequest):
    """Apply the task prompt to a single chunk."""
    try:
        output = process_chunk(payload.chunk, payload.task_prompt, default_client())
    except Exception as exc:
        raise HTTPException(status_code=502, detail=f"Processing failed: {exc}")
    return {"output": output}


@router.post("/process/batch", response_model=BatchProcessResponse)
def process_batch(payload: BatchProcessRequest):
    """Apply the task prompt to every chunk; per-chunk failures are reported, not raised."""
    results = process_chunks(payload.chunks, payload.task_prompt, payload.mode, default_client())
    return {
        "results": results,
        "completed": sum(r.status == "complete" for r in results),
        "errors": sum(r.status == "error" for r in results),
    }


@router.post("/export", response_model=ExportResponse)
def export(payload: ExportRequest):
    """Render completed results as text, markdown or JSON."""
    return {"format": payload.format, "content": export_results(payload.chunks, payload.results, payload.format)}


# ---------------- Projects ----------------

@router.get("/projects", response_model=List[ProjectSummary])
def projects_list(limit: int = Query(default=100, ge=1, le=1000)):
    """List saved projects, most recently updated first."""
    return list_projects(limit=limit)


@router.post("/projects", response_model=Project)
def projects_create(payload: ProjectCreate):
    """Save a new project."""
    return create_project(payload)


@router.get("/projects/{project_id}", response_model=Project)
def projects_get(project_id: str):
    """Fetch a saved project or return 404."""
    project = get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.put("/projects/{project_id}", response_model=Project)
def projects_update(project_id: str, payload: ProjectUpdate):
    """Update a saved project; reject empty payloads."""
    if not payload.model_fields_set:
        raise HTTPException(status_code=400, detail="Nothing to update")
    project = update_project(project_id, payload)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.delete("/projects/{project_id}")
def projects_delete(project_id: str):
    """Delete a project and surface a 404 when nothing was removed."""
    if not delete_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return {"ok": True, "deleted": project_id}
