"""Conversion between ``ProjectState`` and ``EnhancedProjectState``.

``from_enhanced(to_enhanced(p)) == p`` holds for every base field. Derived
fields (size, hash, mime type) are always recomputed from content, never
trusted from storage.
"""

import hashlib
import math
import mimetypes
from pathlib import PurePosixPath
from typing import Any

from pydantic import ValidationError

from src.project_state.core.logging import get_logger
from src.project_state.models.enhanced import (
    EnhancedProjectDeployment,
    EnhancedProjectFile,
    EnhancedProjectState,
    EnhancedRequirementsEntry,
    SearchIndex,
)
from src.project_state.models.project import (
    ProjectDeployment,
    ProjectFile,
    ProjectState,
    RequirementsEntry,
)

logger = get_logger(__name__)

SEARCH_INDEX_METADATA_KEY = "searchIndex"
DEFAULT_MIME_TYPE = "application/octet-stream"

# Source types mimetypes does not know, or maps inconsistently across platforms
_SOURCE_MIME_TYPES: dict[str, str] = {
    ".ts": "application/typescript",
    ".tsx": "application/typescript",
    ".jsx": "application/javascript",
    ".js": "application/javascript",
    ".md": "text/markdown",
    ".json": "application/json",
    ".html": "text/html",
    ".css": "text/css",
    ".txt": "text/plain",
    ".py": "text/x-python",
}


def guess_mime_type(path: str) -> str:
    suffix = PurePosixPath(path).suffix.lower()
    if suffix in _SOURCE_MIME_TYPES:
        return _SOURCE_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(path, strict=False)
    return guessed or DEFAULT_MIME_TYPE


def content_hash(content: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def chunk_count(content: str, chunk_size: int | None) -> int:
    """Number of chunks ``content`` needs, or 0 if it is stored inline."""
    if chunk_size is None or len(content) <= chunk_size:
        return 0
    return math.ceil(len(content) / chunk_size)


def search_index_from(metadata: dict[str, Any]) -> SearchIndex:
    """Search index kept under ``metadata["searchIndex"]``, empty if absent or malformed."""
    raw = metadata.get(SEARCH_INDEX_METADATA_KEY)
    if not isinstance(raw, dict):
        return SearchIndex()
    try:
        return SearchIndex.model_validate(raw)
    except ValidationError:
        logger.debug("Ignoring malformed search index metadata")
        return SearchIndex()


def to_enhanced_file(file: ProjectFile, chunk_size: int | None = None) -> EnhancedProjectFile:
    return EnhancedProjectFile(
        **file.model_dump(),
        size=len(file.content.encode("utf-8")),
        mime_type=guess_mime_type(file.path),
        hash=content_hash(file.content),
        chunks=chunk_count(file.content, chunk_size),
    )


def to_enhanced(project: ProjectState, chunk_size: int | None = None) -> EnhancedProjectState:
    """Up-convert a project, deriving per-file and search metadata.

    Args:
        project: The canonical record.
        chunk_size: Chunk threshold of a size-limited store, or None to keep
            every file inline.
    """
    return EnhancedProjectState(
        id=project.id,
        name=project.name,
        created_at=project.created_at,
        updated_at=project.updated_at,
        files=[to_enhanced_file(f, chunk_size) for f in project.files],
        requirements=[EnhancedRequirementsEntry(**r.model_dump()) for r in project.requirements],
        deployments=[EnhancedProjectDeployment(**d.model_dump()) for d in project.deployments],
        current_deployment_id=project.current_deployment_id,
        metadata=dict(project.metadata),
        webhooks=list(project.webhooks),
        tenant_id=project.tenant_id,
        search_index=search_index_from(project.metadata),
    )


def _base_fields(model_type: type, value: Any) -> dict[str, Any]:
    return value.model_dump(include=set(model_type.model_fields))


def from_enhanced(enhanced: EnhancedProjectState) -> ProjectState:
    """Down-convert an enhanced record, dropping every derived field."""
    return ProjectState(
        id=enhanced.id,
        name=enhanced.name,
        created_at=enhanced.created_at,
        updated_at=enhanced.updated_at,
        files=[ProjectFile(**_base_fields(ProjectFile, f)) for f in enhanced.files],
        requirements=[
            RequirementsEntry(**_base_fields(RequirementsEntry, r)) for r in enhanced.requirements
        ],
        deployments=[
            ProjectDeployment(**_base_fields(ProjectDeployment, d)) for d in enhanced.deployments
        ],
        current_deployment_id=enhanced.current_deployment_id,
        metadata=dict(enhanced.metadata),
        webhooks=list(enhanced.webhooks),
        tenant_id=enhanced.tenant_id,
    )
