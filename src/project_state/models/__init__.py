"""Project state models."""

from src.project_state.models.base import MonotonicClock, new_id, now_ms
from src.project_state.models.enhanced import (
    EnhancedProjectDeployment,
    EnhancedProjectFile,
    EnhancedProjectState,
    EnhancedRequirementsEntry,
    SearchIndex,
)
from src.project_state.models.enums import (
    DeploymentStatus,
    Priority,
    ProjectStatus,
    RequirementStatus,
    SortDirection,
    SortField,
    StorageKind,
)
from src.project_state.models.project import (
    ProjectDeployment,
    ProjectFile,
    ProjectState,
    RequirementsEntry,
)
from src.project_state.models.records import ProjectRecord

__all__ = [
    # Base
    "MonotonicClock",
    "new_id",
    "now_ms",
    # Enums
    "DeploymentStatus",
    "Priority",
    "ProjectStatus",
    "RequirementStatus",
    "SortDirection",
    "SortField",
    "StorageKind",
    # Canonical state
    "ProjectDeployment",
    "ProjectFile",
    "ProjectState",
    "RequirementsEntry",
    # Enhanced state
    "EnhancedProjectDeployment",
    "EnhancedProjectFile",
    "EnhancedProjectState",
    "EnhancedRequirementsEntry",
    "SearchIndex",
    # Relational rows
    "ProjectRecord",
]
