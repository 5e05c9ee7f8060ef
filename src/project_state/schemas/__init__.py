"""Schemas for project state operations."""

from src.project_state.schemas.pagination import (
    ListProjectsOptions,
    ProjectListEntry,
    ProjectListResult,
    SearchProjectsOptions,
)
from src.project_state.schemas.project import (
    CreateProjectOptions,
    DeploymentCreate,
    FileUpsert,
    GetProjectFilesOptions,
    ProjectUpdateResult,
    UpdateProjectOptions,
)

__all__ = [
    "CreateProjectOptions",
    "DeploymentCreate",
    "FileUpsert",
    "GetProjectFilesOptions",
    "ListProjectsOptions",
    "ProjectListEntry",
    "ProjectListResult",
    "ProjectUpdateResult",
    "SearchProjectsOptions",
    "UpdateProjectOptions",
]
