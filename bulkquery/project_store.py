import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bulkquery.schemas import Project, ProjectCreate, ProjectSummary, ProjectUpdate

logger = logging.getLogger(__name__)

PROJECT_STORE_PATH = os.getenv("PROJECT_STORE_PATH", "./projects.json")


def _default_state() -> Dict[str, dict]:
    return {"projects": {}}


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)


def load_project_store() -> Dict[str, dict]:
    path = PROJECT_STORE_PATH
    if not os.path.exists(path):
        return _default_state()
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError):
        logger.exception("Project store: could not read %s; starting empty", path)
        return _default_state()


def save_project_store(data: Dict[str, dict]) -> None:
    path = PROJECT_STORE_PATH
    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def create_project(payload: ProjectCreate) -> Project:
    data = load_project_store()
    project = Project(project_id=uuid.uuid4().hex, **payload.model_dump())
    data.setdefault("projects", {})[project.project_id] = project.model_dump(mode="json")
    save_project_store(data)
    logger.info("Project store: created project %s (%d chunk(s))", project.project_id, len(project.chunks))
    return project


def get_project(project_id: str) -> Optional[Project]:
    data = load_project_store()
    raw = data.get("projects", {}).get(project_id)
    if not raw:
        return None
    return Project.model_validate(raw)


def update_project(project_id: str, payload: ProjectUpdate) -> Optional[Project]:
    """Apply the fields set on `payload` and bump the project's version."""
    data = load_project_store()
    raw = data.get("projects", {}).get(project_id)
    if not raw:
        return None
    existing = Project.model_validate(raw)
    changes = {
        field: getattr(payload, field)
        for field in payload.model_fields_set
        if getattr(payload, field) is not None
    }
    changes.update({"version": existing.version + 1, "updated_at": datetime.now(timezone.utc)})
    updated = existing.model_copy(update=changes)
    # model_copy skips validation; round-trip so stored chunks are checked.
    updated = Project.model_validate(updated.model_dump(mode="json"))
    data["projects"][project_id] = updated.model_dump(mode="json")
    save_project_store(data)
    logger.info("Project store: updated project %s to version %d", project_id, updated.version)
    return updated


def delete_project(project_id: str) -> bool:
    data = load_project_store()
    removed = bool(data.get("projects", {}).pop(project_id, None))
    if removed:
        save_project_store(data)
    return removed


def list_projects(limit: int = 100) -> List[ProjectSummary]:
    data = load_project_store()
    items: List[ProjectSummary] = []
    for project_id, payload in data.get("projects", {}).items():
        items.append(ProjectSummary(
            project_id=project_id,
            name=payload.get("name") or project_id,
            version=int(payload.get("version", 1)),
            chunk_count=len(payload.get("chunks") or []),
            text_length=len(payload.get("raw_text") or ""),
            updated_at=payload.get("updated_at") or datetime.now(timezone.utc),
        ))
    items.sort(key=lambda x: x.updated_at, reverse=True)
    return items[:max(1, limit)]
