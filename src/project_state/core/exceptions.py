"""Error taxonomy shared by the manager and every storage adapter."""

from enum import Enum
from typing import Any


class ProjectErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    NOT_FOUND = "PROJECT_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    STORAGE_ERROR = "STORAGE_ERROR"
    ACCESS_DENIED = "TENANT_ACCESS_DENIED"


class ProjectStateError(Exception):
    """Base class for all project state errors.

    Attributes:
        code: Machine-readable error code.
        context: Extra fields (project_id, operation, ...) for logs and callers.
    """

    code: ProjectErrorCode = ProjectErrorCode.STORAGE_ERROR

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class ProjectNotFoundError(ProjectStateError):
    """Project does not exist, or the caller's tenant may not see it."""

    code = ProjectErrorCode.NOT_FOUND

    def __init__(self, project_id: str, **context: Any):
        super().__init__(f"Project not found: {project_id}", project_id=project_id, **context)
        self.project_id = project_id


class InvalidInputError(ProjectStateError, ValueError):
    """Missing or malformed arguments, raised before any storage call."""

    code = ProjectErrorCode.INVALID_INPUT


class StorageUnavailableError(ProjectStateError):
    """No storage adapter could be constructed."""

    code = ProjectErrorCode.STORAGE_UNAVAILABLE


class StorageBackendError(ProjectStateError):
    """The active adapter's transport failed (network, quota, serialization)."""

    code = ProjectErrorCode.STORAGE_ERROR

    def __init__(self, message: str, *, operation: str, backend: str, **context: Any):
        super().__init__(message, operation=operation, backend=backend, **context)
        self.operation = operation
        self.backend = backend


class TenantAccessDeniedError(ProjectStateError):
    """Tenant check failed on a path where disclosing existence is acceptable."""

    code = ProjectErrorCode.ACCESS_DENIED

    def __init__(self, project_id: str, tenant_id: str | None):
        super().__init__(
            f"Tenant '{tenant_id or 'unscoped'}' may not access project {project_id}",
            project_id=project_id,
            tenant_id=tenant_id,
        )
        self.project_id = project_id
        self.tenant_id = tenant_id
