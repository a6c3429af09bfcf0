from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from bulkquery.textutils import count_words

JsonDict = Dict[str, Any]

SizeIndicator = Literal["small", "good", "large"]
WordCountStatus = Literal["low", "good", "high"]
ChunkingStrategy = Literal["oracle", "local"]
SegmentKind = Literal["paragraph", "line", "sentence"]
ProcessingStatus = Literal["pending", "processing", "complete", "error"]
ProcessingMode = Literal["sequential", "parallel"]
ExportFormat = Literal["text", "markdown", "json"]


# =============================================================================
# Chunks
# A chunk is immutable once built. Editor operations replace chunks with new
# objects; `word_count` is always derived from `text`.
# =============================================================================

class Chunk(BaseModel):
    """A contiguous, labeled slice of the source text."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    title: str
    start: str = ""                            # verbatim opening words
    end: str = ""                              # verbatim closing words
    lines: Tuple[int, int]                     # 1-based, inclusive
    ctx: Optional[str] = None                  # context preamble, None if self-contained
    text: str

    @field_validator("lines")
    @classmethod
    def _check_lines(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        first, last = value
        if first < 1:
            raise ValueError(f"line numbers are 1-based, got {first}")
        if first > last:
            raise ValueError(f"first line {first} is after last line {last}")
        return value

    @computed_field
    @property
    def word_count(self) -> int:
        return count_words(self.text)


class ManifestEntry(BaseModel):
    """One proposed chunk from the chunking oracle; carries no body text."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    start: str = ""
    end: str = ""
    lines: Tuple[int, int]
    ctx: Optional[str] = None

    @field_validator("title", "ctx")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("start", "end", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class ChunkManifest(BaseModel):
    chunks: List[ManifestEntry]


class ChunkingResult(BaseModel):
    chunks: List[Chunk]
    strategy: ChunkingStrategy
    fallback_reason: Optional[str] = None
    skipped_lines: List[Tuple[int, int]] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)


class Segmentation(BaseModel):
    """Candidate split points for an interactive split."""
    kind: SegmentKind
    delimiter: str
    segments: List[str]


class ChunkStats(BaseModel):
    count: int = 0
    total_words: int = 0
    avg_words: int = 0
    min_words: int = 0
    max_words: int = 0
    estimated_input_tokens: int = 0
    estimated_output_tokens: int = 0


# ---------------- Chunking requests ----------------

class ChunkDetectionRequest(BaseModel):
    text: str = Field(min_length=1)
    task_prompt: Optional[str] = None
    use_oracle: bool = True


class ChunkSequence(BaseModel):
    chunks: List[Chunk]


class ChunkMergeRequest(ChunkSequence):
    chunk_ids: List[str]


class ChunkSplitRequest(ChunkSequence):
    chunk_id: str


class ChunkInteractiveSplitRequest(ChunkSplitRequest):
    boundary_index: int


class ChunkValidationRequest(ChunkSequence):
    text: Optional[str] = None
    skipped_lines: List[Tuple[int, int]] = Field(default_factory=list)


class ChunkValidationResponse(BaseModel):
    ok: bool
    issues: List[str] = Field(default_factory=list)


class ChunkStatsRequest(ChunkSequence):
    task_prompt: str = ""


class ChunkStatsResponse(BaseModel):
    stats: ChunkStats
    indicators: Dict[str, SizeIndicator] = Field(default_factory=dict)


# ---------------- Processing ----------------

class ProcessingResult(BaseModel):
    chunk_id: str
    status: ProcessingStatus = "pending"
    output: Optional[str] = None
    error: Optional[str] = None


class ProcessRequest(BaseModel):
    chunk: Chunk
    task_prompt: str = Field(min_length=1)


class ProcessResponse(BaseModel):
    output: str


class BatchProcessRequest(ChunkSequence):
    task_prompt: str = Field(min_length=1)
    mode: ProcessingMode = "sequential"


class BatchProcessResponse(BaseModel):
    results: List[ProcessingResult]
    completed: int
    errors: int


class ExportRequest(ChunkSequence):
    results: List[ProcessingResult]
    format: ExportFormat = "text"


class ExportResponse(BaseModel):
    format: ExportFormat
    content: str


# =============================================================================
# Projects
# A project bundles the task prompt, the raw text, the edited chunk sequence
# and any processing results so a session can be resumed.
# =============================================================================

class ProjectCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = Field(min_length=1, max_length=200)
    task_prompt: str = ""
    raw_text: str = ""
    chunks: List[Chunk] = Field(default_factory=list)
    results: List[ProcessingResult] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    task_prompt: Optional[str] = None
    raw_text: Optional[str] = None
    chunks: Optional[List[Chunk]] = None
    results: Optional[List[ProcessingResult]] = None


class Project(ProjectCreate):
    project_id: str = Field(min_length=1)
    version: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ProjectSummary(BaseModel):
    project_id: str
    name: str
    version: int
    chunk_count: int
    text_length: int
    updated_at: datetime
