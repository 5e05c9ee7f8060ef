"""Enhanced project state: the schema-rich form stored by richer backends."""

from typing import Any

from pydantic import Field

from src.project_state.models.base import CamelModel
from src.project_state.models.enums import Priority, ProjectStatus, RequirementStatus
from src.project_state.models.project import (
    ProjectDeployment,
    ProjectFile,
    RequirementsEntry,
)


class SearchIndex(CamelModel):
    """Terms a project is found by. ``last_indexed`` is set when the index is written."""

    keywords: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    last_indexed: int | None = None


class EnhancedProjectFile(ProjectFile):
    """File with derived size, type and content hash.

    ``chunks`` is the number of chunk keys holding the content in a
    size-limited store; 0 means the content is stored inline.
    """

    size: int
    mime_type: str
    hash: str
    version: int = 1
    chunks: int = 0
    tags: list[str] = Field(default_factory=list)


class EnhancedRequirementsEntry(RequirementsEntry):
    status: RequirementStatus = RequirementStatus.PENDING
    priority: Priority = Priority.MEDIUM


class EnhancedProjectDeployment(ProjectDeployment):
    environment: str = "production"
    branch: str = "main"
    build_time: int = 0


class EnhancedProjectState(CamelModel):
    """Superset of ``ProjectState`` with per-file and search metadata."""

    id: str
    name: str
    created_at: int
    updated_at: int
    files: list[EnhancedProjectFile] = Field(default_factory=list)
    requirements: list[EnhancedRequirementsEntry] = Field(default_factory=list)
    deployments: list[EnhancedProjectDeployment] = Field(default_factory=list)
    current_deployment_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    webhooks: list[Any] = Field(default_factory=list)
    tenant_id: str | None = None
    version: int = 1
    status: ProjectStatus = ProjectStatus.ACTIVE
    custom_fields: dict[str, Any] = Field(default_factory=dict)
    search_index: SearchIndex = Field(default_factory=SearchIndex)
