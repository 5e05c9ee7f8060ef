"""Option and result schemas for project state operations."""

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.project_state.models.base import CamelModel
from src.project_state.models.enums import DeploymentStatus
from src.project_state.models.project import ProjectFile, ProjectState


class CreateProjectOptions(CamelModel):
    """Schema for creating a project."""

    name: str = Field(min_length=1, max_length=200)
    initial_requirements: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] | None = None
    tenant_id: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name cannot be empty or whitespace only")
        return v

    @field_validator("initial_requirements", "user_id", "tenant_id")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class FileUpsert(CamelModel):
    """A file write requested by a caller. Timestamps are assigned by the manager."""

    path: str = Field(min_length=1)
    content: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("File path cannot be empty or whitespace only")
        return v


class UpdateProjectOptions(CamelModel):
    """Schema for updating a project. Unset fields are left untouched."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    updated_files: list[FileUpsert] | None = None
    deleted_file_paths: list[str] | None = None
    new_requirements: str | None = None
    metadata: dict[str, Any] | None = None
    webhooks: list[Any] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Project name cannot be empty or whitespace only")
        return v


class ProjectUpdateResult(BaseModel):
    """Outcome of ``update_project`` with the files each change touched."""

    success: bool = True
    project: ProjectState
    new_files: list[ProjectFile] = Field(default_factory=list)
    updated_files: list[ProjectFile] = Field(default_factory=list)
    deleted_files: list[ProjectFile] = Field(default_factory=list)


class DeploymentCreate(CamelModel):
    """Deployment details supplied by the deployment subsystem; the id is generated."""

    url: str
    provider: str = Field(min_length=1)
    status: DeploymentStatus
    timestamp: int | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None


class GetProjectFilesOptions(CamelModel):
    """Filters for ``get_project_files``."""

    include_deleted: bool = False
    include_paths: list[str] | None = None
    exclude_paths: list[str] | None = None
    pattern: str | re.Pattern[str] | None = None

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str | re.Pattern[str] | None) -> re.Pattern[str] | None:
        if v is None or isinstance(v, re.Pattern):
            return v
        try:
            return re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid file pattern: {e}") from e
