"""Listing schemas backed by the project list index."""

from pydantic import BaseModel, Field, field_validator, model_validator

from src.project_state.models.base import CamelModel
from src.project_state.models.enums import SortDirection, SortField
from src.project_state.models.project import ProjectState


class ListProjectsOptions(CamelModel):
    """Offset-based listing options.

    Offset pagination is used because the index is sliced in memory; backends
    without query support can still page consistently.
    """

    user_id: str | None = None
    tenant_id: str | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)
    sort_by: SortField = SortField.UPDATED_AT
    sort_direction: SortDirection = SortDirection.DESC


class SearchProjectsOptions(ListProjectsOptions):
    """Listing options plus a search query and a creation-date range.

    ``query`` is matched case-insensitively as a substring of the project name,
    ``metadata["description"]`` and every search index term. The
    ``created_after`` / ``created_before`` bounds (epoch ms) are inclusive.
    """

    query: str | None = None
    created_after: int | None = None
    created_before: int | None = None

    @field_validator("query")
    @classmethod
    def normalize_query(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def validate_date_range(self) -> "SearchProjectsOptions":
        if (
            self.created_after is not None
            and self.created_before is not None
            and self.created_after > self.created_before
        ):
            raise ValueError("created_after must not be later than created_before")
        return self


class ProjectListEntry(CamelModel):
    """One row of the project list index."""

    id: str
    created_at: int
    updated_at: int
    user_id: str | None = None
    tenant_id: str | None = None

    @classmethod
    def from_project(cls, project: ProjectState) -> "ProjectListEntry":
        return cls(
            id=project.id,
            created_at=project.created_at,
            updated_at=project.updated_at,
            user_id=project.user_id,
            tenant_id=project.tenant_id,
        )


class ProjectListResult(BaseModel):
    """A hydrated page of projects.

    ``total`` counts every index entry matching the filters, before pagination.
    """

    projects: list[ProjectState] = Field(default_factory=list)
    total: int = 0
