"""Canonical project state records."""

from typing import Any

from pydantic import Field

from src.project_state.models.base import CamelModel
from src.project_state.models.enums import DeploymentStatus


class ProjectFile(CamelModel):
    """A file in a project. Deleted files keep their record with ``is_deleted``."""

    path: str
    content: str
    created_at: int
    updated_at: int
    is_deleted: bool = False


class RequirementsEntry(CamelModel):
    """One submission in a project's append-only requirements history."""

    id: str
    content: str
    timestamp: int
    user_id: str | None = None
    metadata: dict[str, Any] | None = None


class ProjectDeployment(CamelModel):
    """One entry in a project's append-only deployment history."""

    id: str
    url: str
    provider: str
    timestamp: int
    status: DeploymentStatus
    error_message: str | None = None
    metadata: dict[str, Any] | None = None


class ProjectState(CamelModel):
    """The authoritative record of a generated project.

    Created and mutated only through ``ProjectStateManager``.
    """

    id: str
    name: str
    created_at: int
    updated_at: int
    files: list[ProjectFile] = Field(default_factory=list)
    requirements: list[RequirementsEntry] = Field(default_factory=list)
    deployments: list[ProjectDeployment] = Field(default_factory=list)
    current_deployment_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    webhooks: list[Any] = Field(default_factory=list)
    tenant_id: str | None = None

    @property
    def user_id(self) -> str | None:
        """ID of the user who created the project, if recorded."""
        value = self.metadata.get("userId")
        return value if isinstance(value, str) and value else None

    def active_file(self, path: str) -> ProjectFile | None:
        """Return the non-deleted file at ``path``, if any."""
        for file in self.files:
            if file.path == path and not file.is_deleted:
                return file
        return None
